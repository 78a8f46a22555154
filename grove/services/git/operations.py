"""Git operations service"""

import git
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Tuple, Union, TYPE_CHECKING

from grove.constants import BARE_FETCH_REFSPEC, DEFAULT_REMOTE, MAIN_BRANCHES
from grove.exceptions import GitOperationError
from grove.services.git.errors import describe_git_error
from grove.utils.logging import get_logger

if TYPE_CHECKING:
    from grove.config import Config

logger = get_logger(__name__)


def parse_remote_tracking_reference(reference: str) -> Optional[Tuple[str, str]]:
    """Split `origin/feature/x` or `refs/remotes/origin/feature/x` into (remote, branch)."""
    if reference.startswith("refs/remotes/"):
        normalized = reference[len("refs/remotes/"):]
    elif reference.startswith("refs/"):
        return None
    else:
        normalized = reference

    remote, _, branch = normalized.partition("/")
    if not remote or not branch:
        return None
    return remote, branch


def clone_bare_repository(git_url: str, target_dir: Union[str, Path]) -> git.Repo:
    """Clone `git_url` as a bare repository and configure remote-tracking fetches.

    Bare clones do not fetch into refs/remotes by default; without the refspec
    `origin/<branch>` references would never be created.

    Raises:
        GitOperationError: if the clone or configuration fails
    """
    try:
        repo = git.Repo.clone_from(git_url, str(target_dir), bare=True)
    except git.exc.GitCommandError as e:
        raise GitOperationError("clone", message=describe_git_error("git clone --bare", e))

    try:
        with repo.config_writer() as writer:
            writer.set_value(f'remote "{DEFAULT_REMOTE}"', "fetch", BARE_FETCH_REFSPEC)
    except (OSError, git.exc.GitError) as e:
        raise GitOperationError("configure", message=str(e))

    logger.info(f"Cloned {git_url} into {target_dir} (bare)")
    return repo


class GitOperations:
    """Service for repository-level Git operations."""

    def __init__(self, repo_path: Union[str, Path], config: Optional[Union["Config", dict]] = None):
        """Initialize the service.

        Args:
            repo_path: Path to the bare repository (string path, not repo object)
            config: Configuration dictionary or Config object
        """
        self.repo_path = str(repo_path)
        self.config = config or {}
        self.remote_name = DEFAULT_REMOTE  # Store remote name, not object
        self.in_git_operation = False  # Track if operation is in progress

        logger.debug("Git operations initialized")

    def _get_repo(self):
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call to ensure thread safety.

        Returns:
            git.Repo: A fresh repository instance
        """
        return git.Repo(self.repo_path)

    @contextmanager
    def _git_operation(self):
        """Context manager to track git operations."""
        self.in_git_operation = True
        try:
            yield
        finally:
            self.in_git_operation = False

    def reference_exists(self, reference: str) -> bool:
        """Check whether `reference` resolves to an object."""
        try:
            self._get_repo().git.rev_parse("--verify", "--quiet", reference)
            return True
        except git.exc.GitCommandError:
            return False

    def branch_exists(self, branch_name: str) -> bool:
        """Check if a local branch exists."""
        return self.reference_exists(f"refs/heads/{branch_name}")

    def get_default_branch(self) -> str:
        """Determine the default branch from origin/HEAD, falling back to main/master.

        Raises:
            GitOperationError: if no default branch can be determined
        """
        prefix = f"refs/remotes/{self.remote_name}/"
        try:
            ref = self._get_repo().git.symbolic_ref(f"{prefix}HEAD").strip()
            if ref.startswith(prefix):
                return ref[len(prefix):]
            return ref
        except git.exc.GitCommandError as e:
            logger.debug(f"{self.remote_name}/HEAD is not set: {e}")

        for candidate in MAIN_BRANCHES:
            if self.branch_exists(candidate):
                return candidate

        raise GitOperationError(
            "default_branch",
            message="Could not determine default branch. Please specify with --base or --branch.",
        )

    def ensure_tracking_reference(self, track_ref: str) -> None:
        """Make sure a remote-tracking reference exists, fetching it if needed.

        Raises:
            GitOperationError: if the reference is invalid or cannot be fetched
        """
        if self.reference_exists(track_ref):
            return

        parsed = parse_remote_tracking_reference(track_ref)
        if parsed is None:
            raise GitOperationError(
                "track",
                message=f"Tracking reference '{track_ref}' does not exist. "
                "Use a valid remote-tracking branch like 'origin/main'.",
            )

        remote, branch = parsed
        canonical_ref = f"refs/remotes/{remote}/{branch}"
        if self.reference_exists(canonical_ref):
            return

        with self._git_operation():
            try:
                self._get_repo().git.fetch(remote, f"{branch}:{canonical_ref}")
            except git.exc.GitCommandError as e:
                raise GitOperationError(
                    "track", branch, f"Failed to fetch tracking branch '{track_ref}': "
                    f"{describe_git_error('git fetch', e)}"
                )

        if not (self.reference_exists(track_ref) or self.reference_exists(canonical_ref)):
            raise GitOperationError(
                "track",
                message=f"Tracking reference '{track_ref}' is still unavailable "
                f"after fetching from remote '{remote}'.",
            )

    def sync_branch(self, branch_name: str) -> None:
        """Update the local branch from origin (`git fetch origin b:b`).

        Raises:
            GitOperationError: if the fetch fails
        """
        with self._git_operation():
            try:
                self._get_repo().git.fetch(self.remote_name, f"{branch_name}:{branch_name}")
            except git.exc.GitCommandError as e:
                raise GitOperationError("sync", branch_name, describe_git_error("git fetch", e))
        logger.info(f"Synced {branch_name} from {self.remote_name}")

    def fetch_pull_request(self, pr_number: int, local_branch: str) -> None:
        """Fetch a GitHub pull request head into `local_branch`.

        Raises:
            GitOperationError: if the fetch fails
        """
        with self._git_operation():
            try:
                self._get_repo().git.fetch(self.remote_name, f"pull/{pr_number}/head:{local_branch}")
            except git.exc.GitCommandError as e:
                raise GitOperationError("fetch_pr", local_branch, describe_git_error("git fetch", e))

    def get_remote_url(self) -> Optional[str]:
        """URL of the origin remote, if configured."""
        try:
            return self._get_repo().remote(self.remote_name).url
        except (ValueError, git.exc.GitError) as e:
            logger.debug(f"No {self.remote_name} remote: {e}")
            return None
