"""Custom exceptions for grove"""

from typing import Optional


class GroveError(Exception):
    """Base exception for all grove errors."""
    pass


class DiscoveryError(GroveError):
    """Exception raised when the grove repository cannot be located."""

    def __init__(self, message: str, is_regular_git_repo: bool = False):
        self.message = message
        self.is_regular_git_repo = is_regular_git_repo
        super().__init__(message)


class NotARepositoryError(DiscoveryError):
    """Exception raised when no repository exists anywhere above the start directory."""

    def __init__(self, start_path: Optional[str] = None):
        message = "Not in a grove repository"
        if start_path:
            message += f" (searched upward from {start_path})"
        message += ". Run 'grove init <git-url>' to create a new grove setup."
        super().__init__(message)


class FoundUnrelatedRepositoryError(DiscoveryError):
    """Exception raised when only an ordinary (non-bare) Git repository was found."""

    def __init__(self, start_path: Optional[str] = None):
        message = (
            "Found a regular git repository, not a grove setup. "
            "Grove requires a bare clone with worktrees. "
            "Run 'grove init <git-url>' in a different directory to create a new grove setup."
        )
        super().__init__(message, is_regular_git_repo=True)
        self.start_path = start_path


class InvalidBranchNameError(GroveError):
    """Exception raised when a branch name cannot be mapped to a safe worktree path."""

    def __init__(self, branch: str, reason: str):
        self.branch = branch
        self.reason = reason
        super().__init__(f"Invalid branch name '{branch}': {reason}")


class GitOperationError(GroveError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class RefNotFoundError(GitOperationError):
    """Exception raised when a branch or ref cannot be resolved."""

    def __init__(self, ref: str):
        super().__init__("resolve_ref", ref, "Ref not found")


class MergeCheckFailedError(GitOperationError):
    """Exception raised when the merge state of a branch could not be determined."""

    def __init__(self, branch: str, message: Optional[str] = None):
        super().__init__("merge_check", branch, message)


class RemovalFailedError(GitOperationError):
    """Exception raised when a worktree could not be removed."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__("worktree_remove", message=f"{path}: {message}" if message else path)


class DirtyWorktreeBlockedError(GroveError):
    """Exception raised when removing a worktree with uncommitted changes without force."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Worktree at {path} has uncommitted changes. "
            "Use --force to remove it anyway, or commit/stash your changes first."
        )


class WorktreeNotFoundError(GroveError):
    """Exception raised when no worktree matches a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Worktree '{name}' not found. Use 'grove list' to see available worktrees.")


class ProtectedWorktreeError(GroveError):
    """Exception raised when attempting to remove the main or a locked worktree."""

    def __init__(self, branch: str, reason: str):
        self.branch = branch
        self.reason = reason
        super().__init__(f"Cannot remove worktree '{branch}': {reason}")


class ConflictingPolicyError(GroveError):
    """Exception raised when both a base branch and an age threshold are given."""

    def __init__(self):
        super().__init__("--base and --older-than cannot be used together")


class InvalidDurationError(GroveError):
    """Exception raised for durations that cannot be parsed."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(
            f"Invalid duration format: '{value}' "
            "(use formats like: 30d, 2w, 6M, 1y, 12h, 30m or ISO 8601 like P30D, P1Y, P2W, PT1H)"
        )


class InvalidGitUrlError(GroveError):
    """Exception raised for repository URLs grove cannot clone."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Invalid git URL: {url}")


class GitHubAPIError(GroveError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
