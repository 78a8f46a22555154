"""Configuration handling for grove"""

from dataclasses import dataclass, field
from typing import Optional, List

from grove.exceptions import ConflictingPolicyError
from grove.utils.duration import parse_duration


@dataclass
class Config:
    """Configuration for grove with validation."""

    # Prune policy (mutually exclusive)
    base_branch: Optional[str] = None
    older_than: Optional[str] = None

    # Branches treated as the primary worktree
    main_branches: List[str] = field(default_factory=lambda: ["main", "master"])

    # Execution modes
    dry_run: bool = False
    force: bool = False
    yes: bool = False  # Skip confirmation prompts
    verbose: bool = False
    debug: bool = False
    sequential: bool = False  # Force sequential processing (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    # GitHub integration (grove pr)
    github_token: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_policy()
        self._validate_base_branch()
        self._validate_older_than()
        self._validate_main_branches()
        self._validate_workers()

    def _validate_policy(self):
        """Validate that only one prune policy is selected."""
        if self.base_branch and self.older_than:
            raise ConflictingPolicyError()

    def _validate_base_branch(self):
        """Validate base_branch is not blank when given."""
        if self.base_branch is None:
            return
        if not self.base_branch.strip():
            raise ValueError("base_branch cannot be empty")
        self.base_branch = self.base_branch.strip()

    def _validate_older_than(self):
        """Validate older_than is a parseable duration."""
        if self.older_than is None:
            return
        parse_duration(self.older_than)

    def _validate_main_branches(self):
        """Validate main_branches list."""
        if not isinstance(self.main_branches, list) or not self.main_branches:
            raise ValueError("main_branches must be a non-empty list")

    def _validate_workers(self):
        """Validate workers is positive when set."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "base_branch": self.base_branch,
            "older_than": self.older_than,
            "main_branches": self.main_branches,
            "dry_run": self.dry_run,
            "force": self.force,
            "yes": self.yes,
            "verbose": self.verbose,
            "debug": self.debug,
            "sequential": self.sequential,
            "workers": self.workers,
            "github_token": self.github_token,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "base_branch",
            "older_than",
            "main_branches",
            "dry_run",
            "force",
            "yes",
            "verbose",
            "debug",
            "sequential",
            "workers",
            "github_token",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
