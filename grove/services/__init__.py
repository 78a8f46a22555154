"""Services that implement grove's worktree workflow."""

from .path_guard import compute_worktree_path, sanitize_branch_name
from .prune_service import PruneService
from .display_service import DisplayService
from .github_service import GitHubService
from .copy_config import CopyConfig, load_copy_config, copy_matching_files

__all__ = [
    "compute_worktree_path",
    "sanitize_branch_name",
    "PruneService",
    "DisplayService",
    "GitHubService",
    "CopyConfig",
    "load_copy_config",
    "copy_matching_files",
]
