"""Worktree data models."""

from dataclasses import dataclass, field
from datetime import datetime

from grove.constants import DETACHED_HEAD, EPOCH


@dataclass(frozen=True)
class WorktreeRecord:
    """Information about a linked worktree."""

    path: str
    branch: str
    head: str
    created_at: datetime = field(default=EPOCH)  # EPOCH = unknown
    is_dirty: bool = False
    is_locked: bool = False
    is_prunable: bool = False  # Reported stale by git itself
    is_main: bool = False

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED_HEAD

    @property
    def has_known_creation_time(self) -> bool:
        return self.created_at != EPOCH

    def to_dict(self) -> dict:
        """Serialize for `grove list --json`."""
        return {
            "path": self.path,
            "branch": self.branch,
            "head": self.head,
            "createdAt": self.created_at.isoformat() if self.has_known_creation_time else None,
            "isDirty": self.is_dirty,
            "isLocked": self.is_locked,
            "isPrunable": self.is_prunable,
            "isMain": self.is_main,
        }

    def __str__(self) -> str:
        """String representation of worktree."""
        flags = [name for name, on in (
            ("main", self.is_main),
            ("dirty", self.is_dirty),
            ("locked", self.is_locked),
            ("prunable", self.is_prunable),
        ) if on]
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.branch} @ {self.path}{suffix}"
