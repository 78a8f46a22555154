"""Merge detection service for grove."""

import git
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Union, TYPE_CHECKING

from grove.exceptions import MergeCheckFailedError, RefNotFoundError
from grove.services.git.errors import describe_git_error
from grove.utils.logging import get_logger

if TYPE_CHECKING:
    from grove.config import Config

logger = get_logger(__name__)


def _split_nul(output: str) -> List[str]:
    """Split NUL-terminated `-z` output into raw (unquoted) paths."""
    return [path for path in output.split("\0") if path]


class MergeDetector:
    """Service for detecting if a branch's changes are already in a base branch."""

    def __init__(self, repo_path: Union[str, Path], config: Optional[Union["Config", dict]] = None):
        """Initialize the merge detector.

        Args:
            repo_path: Path to the git repository
            config: Configuration dictionary or Config object
        """
        self.repo_path = str(repo_path)
        self.config = config or {}
        self._merge_status_cache: Dict[str, bool] = {}
        self._cache_lock = Lock()  # Thread safety for cache access
        self.merge_detection_stats = {
            "ancestor": 0,
            "squash": 0,
        }
        self._stats_lock = Lock()

        logger.debug("Merge detector initialized")

    def _get_repo(self):
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call to ensure thread safety.
        GitPython repos are lightweight - they don't clone, just open the existing repo.

        Returns:
            git.Repo: A fresh repository instance
        """
        return git.Repo(self.repo_path)

    def _check_cache(self, key: str) -> tuple[bool, bool]:
        """Thread-safe cache check. Returns (found, value)."""
        with self._cache_lock:
            if key in self._merge_status_cache:
                return (True, self._merge_status_cache[key])
            return (False, False)

    def _set_in_cache(self, key: str, value: bool):
        """Thread-safe cache write."""
        with self._cache_lock:
            self._merge_status_cache[key] = value

    def _increment_stat(self, method: str):
        """Thread-safe stats increment."""
        with self._stats_lock:
            self.merge_detection_stats[method] += 1

    def clear_cache(self):
        """Forget cached merge results (e.g. after fetching)."""
        with self._cache_lock:
            self._merge_status_cache.clear()

    def get_merge_stats(self) -> str:
        """Get a summary of which methods detected merges."""
        with self._stats_lock:
            stats = [f"{method}: {count}" for method, count in self.merge_detection_stats.items() if count]
        if not stats:
            return "No merges detected"
        return f"Merges detected by: {', '.join(stats)}"

    def resolve_commit(self, ref: str) -> str:
        """Resolve a branch or ref to a commit SHA.

        Raises:
            RefNotFoundError: if the ref does not name a commit
        """
        try:
            return self._get_repo().git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}")
        except git.exc.GitCommandError:
            raise RefNotFoundError(ref)

    def is_branch_merged(self, branch_name: str, base_branch: str) -> bool:
        """Check if a branch's changes are integrated into `base_branch`.

        First an ancestry check (fast-forward or merge commit), then a
        squash-merge check on the files the branch touched.

        Raises:
            RefNotFoundError: if either ref cannot be resolved
            MergeCheckFailedError: if git fails while comparing the branches
        """
        if branch_name == base_branch:
            return True

        branch_sha = self.resolve_commit(branch_name)
        base_sha = self.resolve_commit(base_branch)

        # Keyed by SHAs so a moved branch or base is never served stale
        cache_key = f"{branch_sha}:{base_sha}"
        found, value = self._check_cache(cache_key)
        if found:
            return value

        result = self._check_ancestor(branch_name, branch_sha, base_sha) or self._check_squash_merge(
            branch_name, branch_sha, base_sha
        )
        self._set_in_cache(cache_key, result)
        return result

    def _check_ancestor(self, branch_name: str, branch_sha: str, base_sha: str) -> bool:
        """Stage 1: branch tip is reachable from the base tip."""
        logger.debug(f"[Ancestor] Checking if {branch_name} tip is an ancestor of base...")
        try:
            self._get_repo().git.merge_base("--is-ancestor", branch_sha, base_sha)
        except git.exc.GitCommandError as e:
            # Exit status 1 means "not an ancestor"; anything else is a real failure
            if e.status == 1:
                return False
            raise MergeCheckFailedError(branch_name, describe_git_error("git merge-base", e))

        logger.debug(f"[Ancestor] Branch {branch_name} is merged (tip is ancestor)")
        self._increment_stat("ancestor")
        return True

    def get_changed_files(self, branch_sha: str, base_sha: str) -> List[str]:
        """Files the branch changed since it diverged from base (three-dot diff)."""
        output = self._get_repo().git.diff("--name-only", "-z", f"{base_sha}...{branch_sha}")
        return _split_nul(output)

    def _check_squash_merge(self, branch_name: str, branch_sha: str, base_sha: str) -> bool:
        """Stage 2: every file the branch touched already matches the base.

        Can report a false positive if the same content reached the base
        through unrelated commits.
        """
        logger.debug(f"[Squash] Checking {branch_name} for a squash merge...")
        try:
            files = self.get_changed_files(branch_sha, base_sha)
            if not files:
                logger.debug(f"[Squash] Branch {branch_name} has no changes of its own")
                self._increment_stat("squash")
                return True

            pathspecs = [f":(literal){path}" for path in files]
            diff = self._get_repo().git.diff("--name-only", "-z", base_sha, branch_sha, "--", *pathspecs)
        except git.exc.GitCommandError as e:
            raise MergeCheckFailedError(branch_name, describe_git_error("git diff", e))

        if _split_nul(diff):
            return False

        logger.debug(f"[Squash] Branch {branch_name} is merged ({len(files)} files identical on base)")
        self._increment_stat("squash")
        return True
