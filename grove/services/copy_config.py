"""Project-level copy configuration applied to newly created worktrees.

`.grove.json` at the project root lists files (typically untracked ones such
as `.env`) that `grove add` copies from an existing worktree:

    {"copy": {"include": [".env", "config/*.local.json"], "exclude": ["*.log"], "source": "main"}}
"""
import fnmatch
import json
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from grove.constants import COPY_CONFIG_FILENAME
from grove.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CopyConfig:
    """Glob patterns selecting files to copy, relative to the source worktree."""
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    source: Optional[str] = None  # Worktree name; None means the main worktree

    def matches(self, relative_path: str) -> bool:
        """Whether a POSIX-style relative path is selected for copying."""
        def _match(patterns: List[str]) -> bool:
            name = relative_path.rsplit("/", 1)[-1]
            return any(
                fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(name, pattern)
                for pattern in patterns
            )

        return _match(self.include) and not _match(self.exclude)


def _string_list(value, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"'copy.{key}' must be a list of strings")
    return value


def load_copy_config(project_root: Union[str, Path]) -> Optional[CopyConfig]:
    """Read `.grove.json` from the project root.

    Returns:
        CopyConfig, or None when the file is missing, unreadable or has no
        include patterns (problems are logged, never raised)
    """
    config_path = Path(project_root) / COPY_CONFIG_FILENAME
    if not config_path.is_file():
        return None

    try:
        with open(config_path) as f:
            data = json.load(f)
        copy_section = data.get("copy") if isinstance(data, dict) else None
        if copy_section is None:
            return None
        if not isinstance(copy_section, dict):
            raise ValueError("'copy' must be an object")

        source = copy_section.get("source")
        if source is not None and not isinstance(source, str):
            raise ValueError("'copy.source' must be a string")

        config = CopyConfig(
            include=_string_list(copy_section.get("include"), "include"),
            exclude=_string_list(copy_section.get("exclude"), "exclude"),
            source=source,
        )
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring {config_path}: {e}")
        return None

    return config if config.include else None


def copy_matching_files(
    config: CopyConfig, source_dir: Union[str, Path], target_dir: Union[str, Path]
) -> List[str]:
    """Copy selected files from `source_dir` into `target_dir`.

    Existing files in the target are never overwritten and `.git` entries
    are skipped.

    Returns:
        Relative paths of the files that were copied
    """
    source_dir = Path(source_dir)
    target_dir = Path(target_dir)
    copied = []

    for root, dirs, files in os.walk(source_dir):
        dirs[:] = [d for d in dirs if d != ".git"]
        for filename in files:
            if filename == ".git":
                continue
            source_file = Path(root) / filename
            relative = source_file.relative_to(source_dir).as_posix()
            if not config.matches(relative):
                continue

            destination = target_dir / relative
            if os.path.lexists(destination):
                logger.debug(f"Not copying {relative}: already exists in {target_dir}")
                continue

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source_file, destination, follow_symlinks=False)
            except OSError as e:
                logger.warning(f"Failed to copy {relative}: {e}")
                continue
            copied.append(relative)

    logger.debug(f"Copied {len(copied)} file(s) from {source_dir} to {target_dir}")
    return copied
