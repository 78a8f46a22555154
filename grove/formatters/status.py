"""Status formatting utilities."""

from typing import Sequence

from grove.constants import SYMBOL_DIRTY, SYMBOL_LOCKED, SYMBOL_PRUNABLE, WorktreeStyleType
from grove.models.prune import PruneCandidate, PruneReason
from grove.models.worktree import WorktreeRecord


def format_worktree_status(worktree: WorktreeRecord) -> str:
    """
    Format worktree state as a comma-separated list.

    Args:
        worktree: Worktree record

    Returns:
        e.g. "dirty, locked" or "clean" when no flag is set
    """
    flags = []
    if worktree.is_dirty:
        flags.append("dirty")
    if worktree.is_locked:
        flags.append("locked")
    if worktree.is_prunable:
        flags.append("prunable")
    return ", ".join(flags) if flags else "clean"


def format_worktree_symbols(worktree: WorktreeRecord) -> str:
    """Symbols appended after the branch name in listings."""
    symbols = ""
    if worktree.is_dirty:
        symbols += f" {SYMBOL_DIRTY}"
    if worktree.is_locked:
        symbols += f" {SYMBOL_LOCKED}"
    if worktree.is_prunable:
        symbols += f" {SYMBOL_PRUNABLE}"
    return symbols


def format_removal_items(candidates: Sequence[PruneCandidate]) -> str:
    """
    Format prune candidates for a confirmation message.

    Returns:
        One bullet per candidate: "  • branch (reason) path"
    """
    lines = []
    for candidate in candidates:
        reason = "merged" if candidate.reason == PruneReason.MERGED else "older than cutoff"
        dirty = ", uncommitted changes" if candidate.worktree.is_dirty else ""
        lines.append(f"  • {candidate.worktree.branch} ({reason}{dirty}) {candidate.path}")
    return "\n".join(lines)


def get_worktree_style_type(worktree: WorktreeRecord) -> str:
    """
    Determine the style type for a worktree based on its properties.

    Returns:
        WorktreeStyleType constant
    """
    if worktree.is_main:
        return WorktreeStyleType.MAIN
    if worktree.is_locked:
        return WorktreeStyleType.LOCKED
    if worktree.is_dirty:
        return WorktreeStyleType.DIRTY
    return WorktreeStyleType.REGULAR
