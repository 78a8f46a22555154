"""Helpers for turning GitPython failures into readable messages."""

import git


def describe_git_error(action: str, error: Exception) -> str:
    """Build a one-line message from a failed git invocation.

    Args:
        action: What was attempted, e.g. "git worktree remove"
        error: The exception raised by GitPython
    """
    if isinstance(error, git.exc.GitCommandError):
        stderr = (error.stderr or "").strip()
        # GitPython prefixes captured stderr with "stderr: '...'"
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip().strip("'").strip()
        status = error.status if error.status is not None else "unknown"
        if stderr:
            return f"{action} failed (exit {status}): {stderr}"
        return f"{action} failed with exit code {status}"
    return f"{action} failed: {error}"
