"""Path display utilities."""

import os


def format_path_with_tilde(path: str) -> str:
    """Replace a leading home directory with `~`.

    Only replaces at a path boundary, so `/home/user2` is left alone for
    home `/home/user`.
    """
    home = os.path.expanduser("~")
    if not home or home == "~":
        return path
    if path == home:
        return "~"
    if path.startswith(home.rstrip(os.sep) + os.sep):
        return "~" + path[len(home.rstrip(os.sep)):]
    return path


def truncate_path(path: str, width: int) -> str:
    """Keep the tail of `path` so it fits in `width` characters."""
    if width <= 3 or len(path) <= width:
        return path
    return "..." + path[len(path) - (width - 3):]
