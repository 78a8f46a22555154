"""Git remote URL helpers used by `grove init`."""

import posixpath
import re

from grove.exceptions import InvalidGitUrlError

GIT_URL_PATTERNS = (
    re.compile(r"^https?://.+/.+$"),
    re.compile(r"^git@[^:]+:.+$"),
    re.compile(r"^ssh://.+/.+$"),
)


def is_valid_git_url(url: str) -> bool:
    """Accept HTTP(S), scp-style SSH (`git@host:path`) and ssh:// URLs."""
    if not url:
        return False
    return any(pattern.match(url) for pattern in GIT_URL_PATTERNS)


def extract_repo_name(git_url: str) -> str:
    """Repository name from a clone URL, without the `.git` suffix.

    Raises:
        InvalidGitUrlError: if no usable name can be derived
    """
    clean_url = git_url[:-4] if git_url.endswith(".git") else git_url

    if clean_url.startswith("git@"):
        if ":" not in clean_url:
            raise InvalidGitUrlError(git_url, f"Invalid SSH URL format: {git_url}")
        clean_url = clean_url.rsplit(":", 1)[1]

    name = posixpath.basename(clean_url.rstrip("/"))
    if name in ("", ".", ".."):
        raise InvalidGitUrlError(git_url, f"Could not extract valid repository name from: {git_url}")
    return name
