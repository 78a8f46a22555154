"""Repository data model."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Repository:
    """A located grove repository: the bare clone and the project that holds it."""

    path: Path  # Resolved path of the bare clone

    @property
    def project_root(self) -> Path:
        """Directory holding the bare clone and its sibling worktrees."""
        return self.path.parent

    def __str__(self) -> str:
        return str(self.path)
