"""Shared constants for grove."""

from datetime import datetime, timezone
from typing import Tuple


# Branch names treated as the project's primary worktree
MAIN_BRANCHES: Tuple[str, ...] = ("main", "master")

# Branch value for worktrees that are not on a branch
DETACHED_HEAD = "detached HEAD"

# Environment variable caching the discovered bare repository for child processes
GROVE_REPO_ENV = "GROVE_REPO"

# Project-level copy configuration consumed by `grove add`
COPY_CONFIG_FILENAME = ".grove.json"

# Characters that are illegal in directory names on at least one platform
ILLEGAL_PATH_CHARS = '<>:"|?*'

# Sentinel for "creation time unknown"
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

# Fetch refspec configured on freshly cloned bare repositories
BARE_FETCH_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"

DEFAULT_REMOTE = "origin"


# Symbol constants used in `grove list`
SYMBOL_DIRTY = "●"
SYMBOL_LOCKED = "🔒"
SYMBOL_PRUNABLE = "⚠"


# Color/style constants for different worktree states
class WorktreeStyleType:
    """Style types for worktrees."""

    MAIN = "main"
    DIRTY = "dirty"
    LOCKED = "locked"
    REGULAR = "regular"


# CLI colors (Rich color names)
CLI_COLORS = {
    WorktreeStyleType.MAIN: "green",
    WorktreeStyleType.DIRTY: "yellow",
    WorktreeStyleType.LOCKED: "red",
    WorktreeStyleType.REGULAR: "cyan",
}


LEGEND_TEXT = f"Legend: {SYMBOL_DIRTY} dirty, {SYMBOL_LOCKED} locked, {SYMBOL_PRUNABLE} prunable"
