"""Worktree inventory service for grove."""

import git
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Iterator, List, Optional, Sequence, Union, TYPE_CHECKING

from grove.constants import DEFAULT_REMOTE, DETACHED_HEAD, EPOCH, MAIN_BRANCHES
from grove.exceptions import GitOperationError, RemovalFailedError
from grove.models.worktree import WorktreeRecord
from grove.services.git.errors import describe_git_error
from grove.utils.logging import get_logger
from grove.utils.threading import get_optimal_worker_count

if TYPE_CHECKING:
    from grove.config import Config

logger = get_logger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def parse_worktree_porcelain(
    output: str, main_branches: Sequence[str] = MAIN_BRANCHES
) -> Iterator[WorktreeRecord]:
    """Parse `git worktree list --porcelain` output.

    Format (blank line between worktrees):
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   | detached
        locked [reason]
        prunable [reason]
        bare

    Yields non-bare records in listing order, classified but not yet
    enriched with dirty state or creation time.
    """
    current: Optional[dict] = None

    def _build(fields: dict) -> WorktreeRecord:
        return WorktreeRecord(
            path=os.path.realpath(fields["path"]),
            branch=fields.get("branch", ""),
            head=fields.get("head", ""),
            is_main=fields.get("branch", "") in main_branches,
            is_locked=fields.get("locked", False),
            is_prunable=fields.get("prunable", False),
        )

    for line in output.splitlines():
        if line.startswith("worktree "):
            if current is not None and not current.get("bare"):
                yield _build(current)
            current = {"path": line[len("worktree "):]}
            continue

        if current is None:
            continue

        if line.startswith("HEAD "):
            current["head"] = line[len("HEAD "):]
        elif line.startswith("branch "):
            branch_ref = line[len("branch "):]
            if branch_ref.startswith(BRANCH_REF_PREFIX):
                branch_ref = branch_ref[len(BRANCH_REF_PREFIX):]
            current["branch"] = branch_ref
        elif line == "detached":
            current["branch"] = DETACHED_HEAD
        elif line == "locked" or line.startswith("locked "):
            current["locked"] = True
        elif line == "prunable" or line.startswith("prunable "):
            current["prunable"] = True
        elif line == "bare":
            current["bare"] = True

    if current is not None and not current.get("bare"):
        yield _build(current)


def get_created_time(path: Union[str, Path]) -> datetime:
    """Best-effort creation time of a directory.

    Uses the birth time where the platform exposes it, else the modification
    time, else EPOCH (unknown).
    """
    try:
        stat = os.stat(path)
    except OSError:
        return EPOCH

    timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
    if not timestamp or timestamp <= 0:
        return EPOCH
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def match_worktree_by_name(worktrees: Sequence[WorktreeRecord], name: str) -> Optional[WorktreeRecord]:
    """Find a worktree by branch name, directory name or branch suffix."""
    normalized = name.strip().rstrip("/")
    if not normalized:
        return None

    # Exact branch name match
    for wt in worktrees:
        if wt.branch == normalized:
            return wt

    # Directory name (last path component)
    for wt in worktrees:
        if os.path.basename(wt.path.rstrip("/\\")) == normalized:
            return wt

    # Suffix match for nested branches like feature/foo
    for wt in worktrees:
        if wt.branch.endswith(f"/{normalized}"):
            return wt

    return None


class WorktreeService:
    """Service for listing and managing linked worktrees."""

    def __init__(self, repo_path: Union[str, Path], config: Optional[Union["Config", dict]] = None):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the bare repository
            config: Configuration dictionary or Config object
        """
        self.repo_path = str(repo_path)
        self.config = config or {}
        self.main_branches = tuple(self.config.get("main_branches") or MAIN_BRANCHES)
        self.warnings: List[str] = []
        self._warnings_lock = Lock()

    def _get_repo(self):
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call to ensure thread safety.

        Returns:
            git.Repo: A fresh repository instance
        """
        return git.Repo(self.repo_path)

    def _warn(self, message: str):
        logger.warning(message)
        with self._warnings_lock:
            self.warnings.append(message)

    def _list_porcelain(self) -> str:
        try:
            return self._get_repo().git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise GitOperationError("worktree_list", message=describe_git_error("git worktree list", e))

    def _is_dirty(self, path: str) -> bool:
        """Query the worktree itself (not the bare repository) for uncommitted changes."""
        worktree_repo = git.Repo(path)
        try:
            return worktree_repo.is_dirty(untracked_files=True)
        finally:
            worktree_repo.close()

    def get_main_branches(self) -> tuple:
        """Configured main branches plus the branch origin/HEAD points at."""
        prefix = f"refs/remotes/{DEFAULT_REMOTE}/"
        try:
            ref = self._get_repo().git.symbolic_ref(f"{prefix}HEAD").strip()
        except git.exc.GitCommandError:
            return self.main_branches

        default_branch = ref[len(prefix):] if ref.startswith(prefix) else ref
        if default_branch and default_branch not in self.main_branches:
            return self.main_branches + (default_branch,)
        return self.main_branches

    def complete_worktree_info(self, record: WorktreeRecord) -> WorktreeRecord:
        """Enrich a parsed record with main/dirty/creation-time data."""
        is_main = record.is_main or record.branch in self.main_branches

        if not os.path.isdir(record.path):
            self._warn(f"Could not access worktree {record.path}: directory does not exist")
            return replace(record, is_main=is_main)

        is_dirty = False
        try:
            is_dirty = self._is_dirty(record.path)
        except (git.exc.GitError, OSError) as e:
            self._warn(f"Could not access worktree {record.path}: {e}")

        return replace(
            record,
            is_main=is_main,
            is_dirty=is_dirty,
            created_at=get_created_time(record.path),
        )

    def stream_worktrees(self) -> Iterator[WorktreeRecord]:
        """Yield enriched worktrees one at a time as they are checked.

        Each call re-runs `git worktree list`; the iterator cannot be restarted.
        """
        for record in parse_worktree_porcelain(self._list_porcelain(), self.get_main_branches()):
            yield self.complete_worktree_info(record)

    def list_worktrees(self) -> List[WorktreeRecord]:
        """Get enriched information about all worktrees, in listing order."""
        records = list(parse_worktree_porcelain(self._list_porcelain(), self.get_main_branches()))
        logger.debug(f"Found {len(records)} worktrees")

        if self.config.get("sequential", False) or len(records) <= 1:
            return [self.complete_worktree_info(record) for record in records]

        max_workers = get_optimal_worker_count(self.config.get("workers"), task_count=len(records))
        logger.debug(f"Using {max_workers} workers for worktree status checks")

        results: List[Optional[WorktreeRecord]] = [None] * len(records)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self.complete_worktree_info, record): index
                for index, record in enumerate(records)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    self._warn(f"Could not check worktree {records[index].path}: {e}")
                    results[index] = records[index]

        return [record for record in results if record is not None]

    def find_worktree_by_name(self, name: str) -> Optional[WorktreeRecord]:
        """Find a worktree by branch name, directory name or nested-branch suffix."""
        return match_worktree_by_name(self.list_worktrees(), name)

    def add_worktree(
        self,
        worktree_path: Union[str, Path],
        branch_name: str,
        create_branch: bool = False,
        track: Optional[str] = None,
    ) -> None:
        """Create a worktree at `worktree_path` for `branch_name`.

        Args:
            worktree_path: Directory for the new worktree
            branch_name: Branch to check out (or create)
            create_branch: Create the branch with -b instead of checking out an existing one
            track: Remote-tracking branch to start from and track (new branches only)

        Raises:
            GitOperationError: if git refuses to create the worktree
        """
        args = ["add"]
        if create_branch:
            args.extend(["-b", branch_name])
            if track:
                args.append("--track")
            args.append(str(worktree_path))
            if track:
                args.append(track)
        else:
            args.extend([str(worktree_path), branch_name])

        try:
            self._get_repo().git.worktree(*args)
        except git.exc.GitCommandError as e:
            raise GitOperationError("worktree_add", branch_name, describe_git_error("git worktree add", e))
        logger.info(f"Added worktree for {branch_name} at {worktree_path}")

    def remove_worktree(self, path: str, force: bool = False) -> None:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty

        Raises:
            RemovalFailedError: if git could not remove the worktree
        """
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(path)

        try:
            self._get_repo().git.worktree(*args)
        except git.exc.GitCommandError as e:
            error_msg = describe_git_error("git worktree remove", e)
            logger.error(f"Failed to remove worktree at {path}: {error_msg}")
            raise RemovalFailedError(path, error_msg)
        except OSError as e:
            raise RemovalFailedError(path, str(e))
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self) -> tuple[bool, Optional[str]]:
        """Prune stale worktree metadata.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            self._get_repo().git.worktree("prune")
            logger.info("Pruned stale worktree metadata")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = describe_git_error("git worktree prune", e)
            logger.error(f"Failed to prune worktrees: {error_msg}")
            return False, error_msg
