"""Prune policy and result models"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple, Union

from grove.models.worktree import WorktreeRecord


class PruneReason(Enum):
    """Why a worktree qualified for removal."""
    MERGED = "merged"
    AGED = "aged"


@dataclass(frozen=True)
class MergePolicy:
    """Remove worktrees whose branch is integrated into `base`."""
    base: str


@dataclass(frozen=True)
class AgePolicy:
    """Remove worktrees created at or before `cutoff`."""
    cutoff: datetime
    threshold: Optional[str] = None  # Original user input, for messages


PrunePolicy = Union[MergePolicy, AgePolicy]


@dataclass(frozen=True)
class PruneCandidate:
    """A worktree selected for removal."""
    worktree: WorktreeRecord
    reason: PruneReason
    cutoff: Optional[datetime] = None

    @property
    def path(self) -> str:
        return self.worktree.path


@dataclass
class RemovalResult:
    """Outcome of a removal batch. Failures never abort the batch."""
    removed: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    skipped_dirty: List[str] = field(default_factory=list)
    would_remove: List[str] = field(default_factory=list)  # dry-run only
    interrupted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.interrupted
