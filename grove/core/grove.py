"""Core functionality for grove"""

import shutil
import signal
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from rich.console import Console

from grove.config import Config
from grove.exceptions import (
    DirtyWorktreeBlockedError,
    DiscoveryError,
    GitOperationError,
    GroveError,
    InvalidGitUrlError,
    ProtectedWorktreeError,
    WorktreeNotFoundError,
)
from grove.models.prune import PruneCandidate, PrunePolicy, RemovalResult
from grove.models.repository import Repository
from grove.models.worktree import WorktreeRecord
from grove.services.copy_config import copy_matching_files, load_copy_config
from grove.services.display_service import DisplayService, should_include_worktree
from grove.services.git import (
    GitOperations,
    MergeDetector,
    WorktreeService,
    clone_bare_repository,
    discover,
    discover_bare_clone,
)
from grove.services.git.worktrees import match_worktree_by_name
from grove.services.github_service import GitHubService, clean_branch_for_path
from grove.services.path_guard import compute_worktree_path
from grove.services.prune_service import PruneService
from grove.utils.git_urls import extract_repo_name, is_valid_git_url
from grove.utils.logging import get_logger

console = Console()
logger = get_logger(__name__)

# Module-level reference to the active Grove instance for signal handling
_active_grove: Optional["Grove"] = None


def _signal_handler(signum, frame):
    """Handle interrupt signals gracefully."""
    if signum == signal.SIGINT:
        print()  # New line after ^C
        if _active_grove and _active_grove.git_service.in_git_operation:
            console.print(
                "\n[yellow]Interrupted! Waiting for current Git operation to complete...[/yellow]"
            )
        else:
            console.print("\n[yellow]Interrupted! Cleaning up...[/yellow]")
        sys.exit(1)


def install_signal_handler() -> None:
    """Exit cleanly on Ctrl+C (removal batches install their own handler while running)."""
    signal.signal(signal.SIGINT, _signal_handler)


def init_project(git_url: str, parent_dir: Optional[Union[str, Path]] = None) -> Path:
    """Create `<name>/<name>.git` as a bare clone of `git_url`.

    Returns:
        Path of the new bare repository

    Raises:
        GroveError: if run inside an existing grove project or the target exists
        InvalidGitUrlError: for unsupported URL formats
        GitOperationError: if the clone fails (the created directory is removed)
    """
    parent = Path(parent_dir) if parent_dir else Path.cwd()

    try:
        existing = discover_bare_clone(parent)
    except DiscoveryError:
        existing = None
    if existing is not None:
        raise GroveError(
            "Cannot initialize grove inside an existing grove repository.\n"
            f"Detected grove repository at: {existing}\n\n"
            "To create a new grove setup, run 'grove init' from outside this directory hierarchy."
        )

    if not is_valid_git_url(git_url):
        raise InvalidGitUrlError(
            git_url,
            "Invalid git URL format. Supported formats:\n"
            "  - HTTPS: https://github.com/user/repo.git\n"
            "  - SSH: git@github.com:user/repo.git\n"
            "  - SSH: ssh://git@github.com/user/repo.git",
        )

    repo_name = extract_repo_name(git_url)
    project_dir = parent / repo_name
    bare_dir = project_dir / f"{repo_name}.git"
    if bare_dir.exists():
        raise GroveError(f"Directory {bare_dir} already exists")

    created_dir = not project_dir.exists()
    project_dir.mkdir(parents=True, exist_ok=True)

    try:
        clone_bare_repository(git_url, bare_dir)
    except GroveError:
        if created_dir:
            shutil.rmtree(project_dir, ignore_errors=True)
        else:
            shutil.rmtree(bare_dir, ignore_errors=True)
        raise

    return bare_dir


class Grove:
    """Main class for managing a project's worktrees."""

    def __init__(
        self,
        repository: Repository,
        config: Optional[Union[Config, dict]] = None,
        output: Optional[Console] = None,
    ):
        """Initialize Grove.

        Args:
            repository: Discovered bare repository
            config: Configuration dict or Config object
            output: Console for user-facing output (defaults to the module console)
        """
        self.repository = repository
        self.repo_path = str(repository.path)
        self.project_root = repository.project_root
        # Convert dict to Config if needed
        if config is None:
            self.config = Config()
        elif isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.console = output or console

        # Initialize services
        self.git_service = GitOperations(self.repo_path, self.config)
        self.worktree_service = WorktreeService(self.repo_path, self.config)
        self.merge_detector = MergeDetector(self.repo_path, self.config)
        self.prune_service = PruneService(self.worktree_service, self.merge_detector, self.git_service)
        self.display_service = DisplayService(
            self.console, verbose=self.config.verbose, debug=self.config.debug
        )

        # Set as active instance for signal handling
        global _active_grove
        _active_grove = self

    @classmethod
    def discover(
        cls,
        start_path: Optional[Union[str, Path]] = None,
        config: Optional[Union[Config, dict]] = None,
        output: Optional[Console] = None,
    ) -> "Grove":
        """Locate the project's bare repository from `start_path` (default: cwd)."""
        return cls(discover(start_path), config, output)

    def _confirm(self, prompt: str) -> bool:
        if self.config.yes:
            return True
        response = self.console.input(f"{prompt} [y/N] ")
        return response.strip().lower() in ("y", "yes")

    # Inventory

    def list_worktrees(self) -> List[WorktreeRecord]:
        return self.worktree_service.list_worktrees()

    def stream_worktrees(self) -> Iterator[WorktreeRecord]:
        return self.worktree_service.stream_worktrees()

    def show_worktrees(
        self, details: bool = False, only_dirty: bool = False, only_locked: bool = False, as_json: bool = False
    ) -> None:
        """Print the worktree list (streamed unless details or JSON are requested)."""
        if as_json:
            self.display_service.display_json(self.list_worktrees(), only_dirty, only_locked)
        elif details:
            self.display_service.display_worktree_table(
                [wt for wt in self.list_worktrees() if should_include_worktree(wt, only_dirty, only_locked)]
            )
        else:
            self.display_service.display_worktree_list(
                self.stream_worktrees(), only_dirty=only_dirty, only_locked=only_locked
            )

    def find_worktree(self, name: str) -> WorktreeRecord:
        """Find a worktree by branch or directory name.

        Raises:
            WorktreeNotFoundError: if nothing matches
        """
        worktree = match_worktree_by_name(self.list_worktrees(), name)
        if worktree is None:
            raise WorktreeNotFoundError(name)
        return worktree

    def go(self, name: str) -> str:
        """Path of the worktree matching `name`."""
        return self.find_worktree(name).path

    # Creation

    def _apply_copy_config(self, worktree_path: Path) -> List[str]:
        copy_config = load_copy_config(self.project_root)
        if copy_config is None:
            return []

        worktrees = self.list_worktrees()
        if copy_config.source:
            source = match_worktree_by_name(worktrees, copy_config.source)
        else:
            source = next((wt for wt in worktrees if wt.is_main), None)

        if source is None:
            logger.warning(
                f"Copy source worktree '{copy_config.source or 'main'}' not found, no files copied"
            )
            return []
        if Path(source.path).resolve() == worktree_path.resolve():
            return []
        return copy_matching_files(copy_config, source.path, worktree_path)

    def add(self, branch_name: str, track: Optional[str] = None) -> Tuple[Path, bool, List[str]]:
        """Create a worktree for `branch_name`, creating the branch if needed.

        Returns:
            Tuple of (worktree_path, is_new_branch, copied_files)

        Raises:
            InvalidBranchNameError: if the branch name maps outside the project
            GitOperationError: if the worktree could not be created either way
        """
        worktree_path = compute_worktree_path(branch_name, self.project_root)

        if track:
            self.git_service.ensure_tracking_reference(track)

        # Existing branch first; git fails if it does not exist
        is_new_branch = False
        try:
            self.worktree_service.add_worktree(worktree_path, branch_name, create_branch=False)
        except GitOperationError as existing_error:
            try:
                self.worktree_service.add_worktree(
                    worktree_path, branch_name, create_branch=True, track=track
                )
                is_new_branch = True
            except GitOperationError as new_error:
                raise GitOperationError(
                    "worktree_add",
                    branch_name,
                    f"Failed to create worktree for '{branch_name}':\n"
                    f"  As existing branch: {existing_error.message or existing_error}\n"
                    f"  As new branch: {new_error.message or new_error}",
                )

        copied = self._apply_copy_config(worktree_path)
        return worktree_path, is_new_branch, copied

    def pr(self, pr_number: int) -> Tuple[Path, bool]:
        """Check out a GitHub pull request into its own worktree.

        Returns:
            Tuple of (worktree_path, created); created is False if the
            worktree already existed

        Raises:
            GitHubAPIError: if the pull request cannot be looked up
            GitOperationError: if fetching or creating the worktree fails
        """
        if pr_number <= 0:
            raise GroveError(f"Invalid PR number: {pr_number}")

        remote_url = self.git_service.get_remote_url()
        if not remote_url:
            raise GroveError("No origin remote configured")

        github_service = GitHubService(remote_url, self.config)
        branch_name = github_service.get_pr_head_branch(pr_number)

        worktree_name = f"pr-{pr_number}-{clean_branch_for_path(branch_name)}"
        worktree_path = compute_worktree_path(worktree_name, self.project_root)

        if match_worktree_by_name(self.list_worktrees(), worktree_name) is not None:
            return worktree_path, False

        local_branch = f"pr-{pr_number}"
        self.git_service.fetch_pull_request(pr_number, local_branch)
        self.worktree_service.add_worktree(worktree_path, local_branch)
        return worktree_path, True

    # Removal

    def remove(self, name: str, force: bool = False) -> Optional[str]:
        """Remove a single worktree after confirmation.

        Returns:
            The removed path, or None if the user cancelled

        Raises:
            WorktreeNotFoundError: if nothing matches `name`
            ProtectedWorktreeError: for the main worktree or a locked one
            DirtyWorktreeBlockedError: for uncommitted changes without `force`
            RemovalFailedError: if git refuses
        """
        worktree = self.find_worktree(name)

        if worktree.is_main:
            raise ProtectedWorktreeError(worktree.branch, "this is the main worktree")
        if worktree.is_locked:
            raise ProtectedWorktreeError(
                worktree.branch, "it is locked. Unlock it first with 'git worktree unlock'"
            )
        if worktree.is_dirty and not force:
            raise DirtyWorktreeBlockedError(worktree.path)

        prompt = f"Are you sure you want to remove the worktree for '{worktree.branch}'?"
        if worktree.is_dirty:
            prompt += " Uncommitted changes will be lost!"
        if not self._confirm(prompt):
            return None

        self.worktree_service.remove_worktree(worktree.path, force=force)
        return worktree.path

    def prune(
        self,
        base: Optional[str] = None,
        older_than: Optional[str] = None,
        dry_run: bool = False,
        force: bool = False,
    ) -> Optional[RemovalResult]:
        """Select and remove worktrees under a merge or age policy.

        Returns:
            RemovalResult, or None when there was nothing to do or the user
            cancelled
        """
        policy: PrunePolicy = self.prune_service.build_policy(base=base, older_than=older_than)
        candidates: List[PruneCandidate] = self.prune_service.select_prune_candidates(policy)

        if not candidates:
            if older_than:
                self.console.print("[yellow]No worktrees found older than the specified duration.[/yellow]")
            else:
                self.console.print("[yellow]No worktrees found with merged branches.[/yellow]")
            return None

        self.display_service.display_prune_candidates(candidates, policy)

        if dry_run:
            result = self.prune_service.remove(candidates, force=force, dry_run=True)
            self.display_service.display_removal_result(result, dry_run=True)
            return result

        if not force:
            dirty_count = sum(1 for c in candidates if c.worktree.is_dirty)
            prompt = f"\nRemove {len(candidates)} worktree(s)?"
            if dirty_count:
                prompt += f" {dirty_count} with uncommitted changes will be skipped (use --force)."
            if not self._confirm(prompt):
                self.console.print("[blue]Operation cancelled.[/blue]")
                return None

        workers = None if self.config.sequential else self.config.workers
        result = self.prune_service.remove(candidates, force=force, workers=workers)
        self.display_service.display_removal_result(result)
        return result

    def sync(self, branch: Optional[str] = None) -> str:
        """Update a branch (default: the default branch) from origin.

        Raises:
            GroveError: if the branch is checked out in a worktree
            GitOperationError: if the fetch fails
        """
        target = branch or self.git_service.get_default_branch()

        if any(wt.branch == target for wt in self.list_worktrees()):
            raise GroveError(
                f"Branch '{target}' is checked out in a worktree. Git won't sync against a "
                f"checked-out branch. Run 'git fetch origin', then merge or rebase from "
                f"'origin/{target}'."
            )

        self.git_service.sync_branch(target)
        self.merge_detector.clear_cache()
        return target

    def close(self) -> None:
        """Release the active-instance reference used by the signal handler."""
        global _active_grove
        if _active_grove is self:
            _active_grove = None
        logger.debug(f"Closed grove for {self.repo_path}")
