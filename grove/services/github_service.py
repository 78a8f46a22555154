"""GitHub API integration service"""
import os
import re
from typing import Optional, TYPE_CHECKING, Union
from urllib.parse import urlparse

from github import Auth, Github, GithubException

from grove.exceptions import GitHubAPIError
from grove.utils.logging import get_logger

if TYPE_CHECKING:
    from github.Repository import Repository
    from grove.config import Config

logger = get_logger(__name__)


def parse_github_repo(remote_url: str) -> Optional[str]:
    """Extract `owner/repo` from a GitHub remote URL, or None for other hosts."""
    if "github.com" not in remote_url:
        return None

    if remote_url.startswith("git@"):
        # SSH URL format (git@github.com:org/repo.git)
        path = remote_url.split("github.com:", 1)[1]
    else:
        # HTTPS or ssh:// URL format (https://github.com/org/repo.git)
        path = urlparse(remote_url).path.strip("/")

    if path.endswith(".git"):
        path = path[:-4]
    return path or None


def clean_branch_for_path(branch_name: str) -> str:
    """Reduce a branch name to characters safe for a directory name."""
    cleaned = re.sub(r"[^\w-]", "-", branch_name)
    return cleaned.replace("--", "-").strip("-")


class GitHubService:
    """Looks up pull request details for the repository's origin remote."""

    def __init__(self, remote_url: str, config: Optional[Union["Config", dict]] = None):
        self.config = config or {}
        self.github_token = self.config.get("github_token") or os.environ.get("GITHUB_TOKEN")
        self.github_repo = parse_github_repo(remote_url)
        self._gh_repo: Optional["Repository"] = None

    def _get_repo(self) -> "Repository":
        if self.github_repo is None:
            raise GitHubAPIError("setup", "origin is not a GitHub repository")

        if self._gh_repo is None:
            if self.github_token:
                github = Github(auth=Auth.Token(self.github_token))
            else:
                logger.debug("[GitHub] No GitHub token found, using unauthenticated access")
                github = Github()
            try:
                self._gh_repo = github.get_repo(self.github_repo)
            except GithubException as e:
                raise GitHubAPIError("get_repo", f"{self.github_repo}: {e.data or e}")
            logger.debug(f"[GitHub] GitHub integration enabled for: {self.github_repo}")
        return self._gh_repo

    def get_pr_head_branch(self, pr_number: int) -> str:
        """Name of the branch a pull request was opened from.

        Raises:
            GitHubAPIError: if the pull request cannot be read
        """
        repo = self._get_repo()
        try:
            pull = repo.get_pull(pr_number)
        except GithubException as e:
            raise GitHubAPIError(
                "get_pull",
                f"Failed to fetch PR #{pr_number}. Make sure the PR exists and you have access "
                f"to the repository ({e.status})",
            )

        branch_name = pull.head.ref or ""
        if not branch_name:
            raise GitHubAPIError("get_pull", f"Could not determine branch name for PR #{pr_number}")
        logger.debug(f"[GitHub] PR #{pr_number} head branch: {branch_name}")
        return branch_name
