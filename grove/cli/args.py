"""Command-line argument parsing for grove."""

import argparse
from grove.__version__ import __version__


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per grove command."""
    parser = argparse.ArgumentParser(
        prog="grove",
        description="Manage a bare clone and its linked Git worktrees",
        epilog="Run 'grove <command> --help' for command options.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information and write ~/.grove/grove.log"
    )
    parser.add_argument("--version", action="version", version=f"grove {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    init_parser = subparsers.add_parser("init", help="Clone a repository as a bare grove project")
    init_parser.add_argument("git_url", help="Repository URL (https, git@host:path or ssh://)")

    add_parser = subparsers.add_parser("add", help="Create a new worktree")
    add_parser.add_argument("branch", help="Branch name (creates new branch if it doesn't exist)")
    add_parser.add_argument(
        "-t", "--track", metavar="REMOTE_BRANCH", help="Set up tracking for the specified remote branch"
    )

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    list_parser.add_argument("--details", action="store_true", help="Show a detailed table")
    list_parser.add_argument("--dirty", action="store_true", help="Only worktrees with uncommitted changes")
    list_parser.add_argument("--locked", action="store_true", help="Only locked worktrees")
    list_parser.add_argument("--json", action="store_true", help="Output JSON for scripting")

    go_parser = subparsers.add_parser("go", help="Print the path of a worktree")
    go_parser.add_argument("name", help="Branch or directory name")

    remove_parser = subparsers.add_parser("remove", aliases=["rm"], help="Remove a worktree")
    remove_parser.add_argument("name", help="Branch or directory name")
    remove_parser.add_argument(
        "--force", action="store_true", help="Remove even with uncommitted changes"
    )
    remove_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    prune_parser = subparsers.add_parser("prune", help="Remove merged or old worktrees")
    prune_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what would be removed without removing anything",
    )
    prune_parser.add_argument(
        "--force",
        action="store_true",
        help="Skip confirmation and also remove worktrees with uncommitted changes",
    )
    prune_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")
    prune_parser.add_argument(
        "--base", metavar="BRANCH", help="Base branch for merge detection (default: origin/HEAD)"
    )
    prune_parser.add_argument(
        "--older-than",
        metavar="DURATION",
        help="Remove worktrees created before this age (30d, 2w, 6M, 1y, 12h, 30m or ISO 8601)",
    )
    prune_parser.add_argument(
        "--workers",
        type=_positive_int,
        metavar="N",
        help="Number of parallel workers for status checks and removal (default: auto-detect)",
    )
    prune_parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    sync_parser = subparsers.add_parser("sync", help="Update a branch from origin")
    sync_parser.add_argument(
        "-b", "--branch", help="Branch to sync (default: the repository's default branch)"
    )

    pr_parser = subparsers.add_parser("pr", help="Check out a GitHub pull request in a new worktree")
    pr_parser.add_argument("number", type=_positive_int, help="Pull request number")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
