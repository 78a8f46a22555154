"""Git-related services for grove."""

from .discovery import clear_discovery_cache, discover, discover_bare_clone, get_project_root
from .operations import GitOperations, clone_bare_repository
from .worktrees import WorktreeService, parse_worktree_porcelain
from .merge_detector import MergeDetector

__all__ = [
    "clear_discovery_cache",
    "discover",
    "discover_bare_clone",
    "get_project_root",
    "GitOperations",
    "clone_bare_repository",
    "WorktreeService",
    "parse_worktree_porcelain",
    "MergeDetector",
]
