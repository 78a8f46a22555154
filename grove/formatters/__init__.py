"""Formatting utilities for grove.

This package provides the formatting functions used to display worktrees,
organized into logical modules:
- date: Creation time formatting
- paths: Path shortening
- status: Worktree status and styling
"""

# Date formatters
from .date import format_created_time, format_date

# Path formatters
from .paths import format_path_with_tilde, truncate_path

# Status formatters
from .status import (
    format_worktree_status,
    format_worktree_symbols,
    format_removal_items,
    get_worktree_style_type,
)

__all__ = [
    # Date
    "format_created_time",
    "format_date",
    # Paths
    "format_path_with_tilde",
    "truncate_path",
    # Status
    "format_worktree_status",
    "format_worktree_symbols",
    "format_removal_items",
    "get_worktree_style_type",
]
