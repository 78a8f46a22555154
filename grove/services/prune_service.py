"""Selection and removal of worktrees that are no longer needed."""

import signal
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

import git

from grove.exceptions import (
    ConflictingPolicyError,
    GroveError,
    MergeCheckFailedError,
    RefNotFoundError,
    RemovalFailedError,
)
from grove.models.prune import (
    AgePolicy,
    MergePolicy,
    PruneCandidate,
    PrunePolicy,
    PruneReason,
    RemovalResult,
)
from grove.models.worktree import WorktreeRecord
from grove.utils.duration import parse_duration
from grove.utils.logging import get_logger

if TYPE_CHECKING:
    from grove.services.git import GitOperations, MergeDetector, WorktreeService

logger = get_logger(__name__)


def is_protected(worktree: WorktreeRecord) -> bool:
    """Main, locked and detached worktrees are never pruned."""
    return worktree.is_main or worktree.is_locked or worktree.is_detached or not worktree.branch


class PruneService:
    """Decides which worktrees can go and removes them one by one."""

    def __init__(
        self,
        worktree_service: "WorktreeService",
        merge_detector: "MergeDetector",
        git_operations: Optional["GitOperations"] = None,
    ):
        self.worktree_service = worktree_service
        self.merge_detector = merge_detector
        self.git_operations = git_operations
        self.warnings: List[str] = []
        self._interrupted = threading.Event()

    def build_policy(
        self,
        base: Optional[str] = None,
        older_than: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PrunePolicy:
        """Turn command-line options into a prune policy.

        Raises:
            ConflictingPolicyError: if both `base` and `older_than` are given
            InvalidDurationError: if `older_than` cannot be parsed
            GitOperationError: if no base is given and no default branch exists
        """
        if base and older_than:
            raise ConflictingPolicyError()

        if older_than:
            now = now or datetime.now(timezone.utc)
            return AgePolicy(cutoff=now - parse_duration(older_than), threshold=older_than)

        if not base:
            if self.git_operations is None:
                raise ValueError("a base branch is required without git operations")
            base = self.git_operations.get_default_branch()
        return MergePolicy(base=base)

    def select_candidates(
        self, worktrees: Iterable[WorktreeRecord], policy: PrunePolicy
    ) -> List[PruneCandidate]:
        """Pick the worktrees that qualify for removal under `policy`.

        A failed merge check is logged and that worktree skipped; it never
        aborts the scan.
        """
        candidates = []
        for worktree in worktrees:
            if is_protected(worktree):
                continue

            if isinstance(policy, AgePolicy):
                if worktree.has_known_creation_time and worktree.created_at <= policy.cutoff:
                    candidates.append(PruneCandidate(worktree, PruneReason.AGED, cutoff=policy.cutoff))
                continue

            if worktree.branch == policy.base:
                continue

            try:
                merged = self.merge_detector.is_branch_merged(worktree.branch, policy.base)
            except (RefNotFoundError, MergeCheckFailedError) as e:
                message = f"Could not check merge status for branch '{worktree.branch}': {e}"
                logger.warning(message)
                self.warnings.append(message)
                continue

            if merged:
                candidates.append(PruneCandidate(worktree, PruneReason.MERGED))

        logger.debug(f"Selected {len(candidates)} prune candidates")
        return candidates

    def select_prune_candidates(self, policy: PrunePolicy) -> List[PruneCandidate]:
        """List the repository's worktrees and select candidates under `policy`."""
        return self.select_candidates(self.worktree_service.list_worktrees(), policy)

    @contextmanager
    def _stop_on_interrupt(self):
        """Turn SIGINT into a stop request for the running removal batch."""
        self._interrupted.clear()
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def _handler(signum, frame):
            logger.warning("Interrupted! Finishing the current removal, no further worktrees will be removed")
            self._interrupted.set()

        previous = signal.signal(signal.SIGINT, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)

    def request_stop(self):
        """Stop issuing removals (already completed removals are kept)."""
        self._interrupted.set()

    def _remove_one(self, candidate: PruneCandidate, force: bool) -> Tuple[str, Optional[str]]:
        if self._interrupted.is_set():
            return "skipped", None
        try:
            self.worktree_service.remove_worktree(candidate.path, force=force)
        except RemovalFailedError as e:
            return "failed", e.message or str(e)
        except (GroveError, git.exc.GitError, OSError) as e:
            logger.error(f"Failed to remove worktree at {candidate.path}: {e}")
            return "failed", str(e)
        return "removed", None

    def remove(
        self,
        candidates: Sequence[PruneCandidate],
        force: bool = False,
        dry_run: bool = False,
        workers: Optional[int] = None,
    ) -> RemovalResult:
        """Remove candidates independently, collecting successes and failures.

        Args:
            candidates: Worktrees to remove, in reporting order
            force: Also remove worktrees with uncommitted changes
            dry_run: Report what would be removed without removing anything
            workers: Remove with a bounded pool of this size (default sequential)

        Returns:
            RemovalResult; never raises for per-worktree failures
        """
        result = RemovalResult()

        eligible = []
        for candidate in candidates:
            if candidate.worktree.is_dirty and not force:
                result.skipped_dirty.append(candidate.path)
            else:
                eligible.append(candidate)

        if dry_run:
            result.would_remove = [candidate.path for candidate in candidates]
            return result

        if result.skipped_dirty:
            logger.warning(
                f"Skipping {len(result.skipped_dirty)} worktree(s) with uncommitted changes (use --force)"
            )

        with self._stop_on_interrupt():
            if workers and workers > 1 and len(eligible) > 1:
                with ThreadPoolExecutor(max_workers=min(workers, len(eligible))) as executor:
                    outcomes = list(executor.map(lambda c: self._remove_one(c, force), eligible))
            else:
                outcomes = []
                for candidate in eligible:
                    outcomes.append(self._remove_one(candidate, force))

        for candidate, (status, error) in zip(eligible, outcomes):
            if status == "removed":
                result.removed.append(candidate.path)
            elif status == "failed":
                result.failed.append((candidate.path, error or "Unknown error"))
            else:
                result.interrupted = True

        if result.interrupted:
            logger.warning(f"Removal interrupted after {len(result.removed)} worktree(s)")

        if result.removed:
            success, error = self.worktree_service.prune_worktrees()
            if not success:
                self.warnings.append(f"Failed to prune worktree metadata: {error}")
        return result
