"""Mapping of branch names to worktree directories."""

import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from grove.constants import ILLEGAL_PATH_CHARS
from grove.exceptions import InvalidBranchNameError

_SANITIZE_TABLE = str.maketrans({char: "-" for char in ILLEGAL_PATH_CHARS})


def sanitize_branch_name(branch_name: str) -> str:
    """Replace characters that are illegal in directory names with '-'."""
    return branch_name.translate(_SANITIZE_TABLE)


def _is_absolute(branch_name: str) -> bool:
    # Reject both flavours so a Windows-style name is refused on POSIX too
    return PurePosixPath(branch_name).is_absolute() or PureWindowsPath(branch_name).is_absolute()


def compute_worktree_path(branch_name: str, project_root: Union[str, Path]) -> Path:
    """Compute the directory for a branch's worktree inside the project.

    ``feature/my-feature`` maps to ``<project_root>/feature/my-feature``.

    Args:
        branch_name: Branch the worktree will check out
        project_root: Directory holding the bare clone

    Returns:
        Resolved absolute path, equal to or below the resolved project root

    Raises:
        InvalidBranchNameError: if the name is blank, contains '..', is absolute,
            or resolves outside the project root
    """
    if not branch_name or not branch_name.strip():
        raise InvalidBranchNameError(branch_name, "branch name is required")

    if ".." in branch_name or _is_absolute(branch_name):
        raise InvalidBranchNameError(branch_name, "contains path traversal characters")

    dir_name = sanitize_branch_name(branch_name).replace("/", os.sep)

    resolved_root = Path(project_root).resolve()
    resolved_path = (resolved_root / dir_name).resolve()

    if resolved_path != resolved_root and resolved_root not in resolved_path.parents:
        raise InvalidBranchNameError(branch_name, "would create worktree outside project")

    return resolved_path
