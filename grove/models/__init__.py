"""Data models for grove."""

from .repository import Repository
from .worktree import WorktreeRecord
from .prune import (
    AgePolicy,
    MergePolicy,
    PruneCandidate,
    PrunePolicy,
    PruneReason,
    RemovalResult,
)

__all__ = [
    "Repository",
    "WorktreeRecord",
    "AgePolicy",
    "MergePolicy",
    "PruneCandidate",
    "PrunePolicy",
    "PruneReason",
    "RemovalResult",
]
