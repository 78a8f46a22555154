"""Discovery of the grove bare repository from anywhere inside a project."""

import os
import re
from pathlib import Path
from typing import Optional, Union

import git

from grove.constants import GROVE_REPO_ENV
from grove.exceptions import FoundUnrelatedRepositoryError, NotARepositoryError
from grove.models.repository import Repository
from grove.utils.logging import get_logger

logger = get_logger(__name__)

_GITDIR_RE = re.compile(r"^gitdir:\s*(.+)$")

# Name of git's per-worktree metadata directory inside the repository
WORKTREES_DIR = "worktrees"


def is_bare_repo_by_structure(path: Path) -> bool:
    """Check if a directory is a bare repository root by looking at its layout.

    Git is not consulted: from inside a linked worktree it reports on the
    linked bare repository, not on the directory itself.
    """
    if os.path.lexists(path / ".git"):
        return False
    return (path / "HEAD").is_file() and (path / "refs").is_dir() and (path / "objects").is_dir()


def is_bare_repository(path: Path) -> bool:
    """Ask git whether `path` is a bare repository (core.bare)."""
    try:
        result = git.Git(str(path)).config("--get", "core.bare")
    except (git.exc.GitError, OSError) as e:
        logger.debug(f"core.bare query failed for {path}: {e}")
        return False
    return result.strip() == "true"


def parse_git_file(git_file: Path) -> str:
    """Read the `gitdir: <path>` pointer from a worktree's .git file.

    Raises:
        ValueError: if the file does not hold a gitdir pointer
    """
    content = git_file.read_text(encoding="utf-8").strip()
    match = _GITDIR_RE.match(content)
    if not match:
        raise ValueError(f"Invalid .git file format at {git_file}")
    return match.group(1).strip()


def extract_bare_clone_from_gitdir(gitdir: Union[str, Path]) -> Path:
    """Strip the trailing `worktrees/<name>` from a worktree's metadata path.

    Only a `worktrees` path component whose parent is a git directory counts,
    so a worktree named "worktrees" or a project under a "worktrees" folder
    cannot confuse the split. When nothing on disk confirms a split (for
    example the metadata was deleted), the first `worktrees` component that
    is followed by a name is used.

    Raises:
        ValueError: if the path contains no `worktrees/<name>` segment
    """
    parts = Path(gitdir).parts
    positions = [i for i, part in enumerate(parts) if part == WORKTREES_DIR and 0 < i < len(parts) - 1]
    if not positions:
        raise ValueError(f"Invalid worktree gitdir path: {gitdir}")

    for index in positions:
        candidate = Path(*parts[:index])
        if (candidate / "HEAD").is_file():
            return candidate
    return Path(*parts[:positions[0]])


def _resolve_gitdir(git_file: Path) -> Path:
    gitdir = Path(parse_git_file(git_file))
    if not gitdir.is_absolute():
        gitdir = git_file.parent / gitdir
    return gitdir.resolve()


def _read_cached_repo() -> Optional[Path]:
    """Return the GROVE_REPO hint if it still points at a bare repository."""
    hint = os.environ.get(GROVE_REPO_ENV)
    if not hint:
        return None

    path = Path(hint)
    if is_bare_repo_by_structure(path) and is_bare_repository(path):
        return path.resolve()

    logger.debug(f"Discarding stale {GROVE_REPO_ENV}={hint}")
    clear_discovery_cache()
    return None


def clear_discovery_cache() -> None:
    """Forget the cached repository location."""
    os.environ.pop(GROVE_REPO_ENV, None)


def discover_bare_clone(start_path: Optional[Union[str, Path]] = None) -> Path:
    """Find the bare clone that owns `start_path`.

    Args:
        start_path: Directory to start from (default: current directory)

    Returns:
        Resolved path of the bare clone

    Raises:
        NotARepositoryError: if no repository was found
        FoundUnrelatedRepositoryError: if only a regular (non-grove) repository was found
    """
    cached = _read_cached_repo()
    if cached is not None:
        logger.debug(f"Using cached repository {cached}")
        return cached

    start = Path(start_path) if start_path is not None else Path(os.getcwd())
    current = start.resolve()

    if is_bare_repo_by_structure(current):
        return current

    # Project root: a *.git bare clone sits directly inside it
    try:
        for entry in sorted(current.iterdir()):
            if entry.name == ".git" or not entry.name.endswith(".git"):
                continue
            if entry.is_dir() and is_bare_repo_by_structure(entry):
                return entry
    except OSError as e:
        logger.debug(f"Could not scan {current}: {e}")

    found_regular_repo = False
    search = current
    while True:
        git_path = search / ".git"
        if git_path.is_file():
            try:
                bare_path = extract_bare_clone_from_gitdir(_resolve_gitdir(git_path))
            except (OSError, ValueError) as e:
                logger.debug(f"Ignoring worktree pointer {git_path}: {e}")
            else:
                if is_bare_repository(bare_path):
                    return bare_path
                logger.debug(f"{bare_path} referenced by {git_path} is not a bare repository")
        elif git_path.is_dir():
            found_regular_repo = True

        if search.parent == search:
            break
        search = search.parent

    if found_regular_repo:
        raise FoundUnrelatedRepositoryError(str(current))
    raise NotARepositoryError(str(current))


def discover(start_path: Optional[Union[str, Path]] = None) -> Repository:
    """Locate the grove repository and cache it for child processes."""
    bare_path = discover_bare_clone(start_path)
    os.environ[GROVE_REPO_ENV] = str(bare_path)
    logger.debug(f"Discovered repository at {bare_path}")
    return Repository(path=bare_path)


def get_project_root(repo: Repository) -> Path:
    """Directory holding the bare clone and its worktrees."""
    return repo.project_root
