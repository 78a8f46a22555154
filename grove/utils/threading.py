"""Threading utilities for sizing worker pools."""

import os
import sys
from typing import Dict, Any, Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with the GIL disabled
    """
    return hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()


def get_optimal_worker_count(user_specified: Optional[int] = None, task_count: Optional[int] = None) -> int:
    """Calculate the worker count for a fan-out over worktrees.

    Args:
        user_specified: User-specified worker count, if provided
        task_count: Number of tasks to run; the pool never exceeds it

    Returns:
        Number of workers, at least 1
    """
    if user_specified is not None and user_specified > 0:
        workers = user_specified
    else:
        cpu_count = os.cpu_count() or 1
        if is_free_threading_enabled():
            workers = min(64, cpu_count * 2)
        else:
            # Status checks are subprocess-bound, so oversubscribe the CPUs a little
            workers = min(32, cpu_count + 4)

    if task_count is not None:
        workers = min(workers, max(task_count, 1))
    return workers


def get_threading_info() -> Dict[str, Any]:
    """Get information about the Python threading configuration.

    Returns:
        Dictionary containing threading mode, worker count, and other details
    """
    return {
        "free_threading": is_free_threading_enabled(),
        "mode": "free-threading" if is_free_threading_enabled() else "GIL",
        "cpu_count": os.cpu_count() or 1,
        "optimal_workers": get_optimal_worker_count(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
