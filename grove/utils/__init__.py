"""Utility functions for grove.

This package provides utility modules:
- logging: Logging configuration and logger creation
- threading: Worker pool sizing
- duration: Age threshold parsing
- git_urls: Clone URL validation
"""

from .logging import setup_logging, get_logger, ColoredFormatter
from .threading import (
    is_free_threading_enabled,
    get_optimal_worker_count,
    get_threading_info,
)
from .duration import parse_duration, normalize_duration
from .git_urls import is_valid_git_url, extract_repo_name

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    # Threading
    "is_free_threading_enabled",
    "get_optimal_worker_count",
    "get_threading_info",
    # Duration
    "parse_duration",
    "normalize_duration",
    # Git URLs
    "is_valid_git_url",
    "extract_repo_name",
]
