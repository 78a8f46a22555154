"""Command-line interface for grove"""

import sys
from rich.console import Console
from rich.markup import escape

from grove.cli.args import parse_args
from grove.config import Config
from grove.core import Grove, init_project, install_signal_handler
from grove.formatters import format_path_with_tilde
from grove.utils.logging import setup_logging
from grove.utils.threading import get_threading_info

console = Console()

COMMAND_ALIASES = {"ls": "list", "rm": "remove"}


def build_config(parsed_args) -> Config:
    """Build a Config from the options the chosen subcommand defines."""
    return Config(
        base_branch=getattr(parsed_args, "base", None),
        older_than=getattr(parsed_args, "older_than", None),
        dry_run=getattr(parsed_args, "dry_run", False),
        force=getattr(parsed_args, "force", False),
        yes=getattr(parsed_args, "yes", False),
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        sequential=getattr(parsed_args, "sequential", False),
        workers=getattr(parsed_args, "workers", None),
    )


def _print_debug_info(config: Config) -> None:
    console.print("[yellow]Debug mode enabled[/yellow]")

    threading_info = get_threading_info()
    console.print("[yellow]Threading Information:[/yellow]")
    console.print(f"  Python version: {threading_info['python_version']}")
    console.print(f"  Threading mode: {threading_info['mode']}")
    console.print(f"  CPU count: {threading_info['cpu_count']}")
    console.print(f"  Optimal workers: {threading_info['optimal_workers']}")
    console.print(f"  Free-threading enabled: {threading_info['free_threading']}")

    console.print("[yellow]Configuration:[/yellow]")
    for key, value in config.to_dict().items():
        if key == "github_token" and value:
            value = "***"
        console.print(f"  {key}: {value}")


def run_init(parsed_args, config: Config) -> None:
    bare_dir = init_project(parsed_args.git_url)
    console.print(f"[green]✓ Initialized worktree setup:[/green] [bold]{escape(bare_dir.parent.name)}[/bold]")
    console.print(f"  [dim]Bare repository:[/dim] {escape(str(bare_dir))}")
    console.print("\n[bold]Next steps:[/bold]")
    console.print(f"  [dim]cd[/dim] {escape(str(bare_dir))}")
    console.print("  [dim]grove add[/dim] <branch-name>")


def run_add(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    path, is_new_branch, copied = grove.add(parsed_args.branch, track=parsed_args.track)

    if is_new_branch:
        console.print(f"[green]✓ Created new branch and worktree:[/green] [bold]{escape(parsed_args.branch)}[/bold]")
    else:
        console.print(f"[green]✓ Created worktree:[/green] [bold]{escape(parsed_args.branch)}[/bold]")
    console.print(f"  [dim]Path:[/dim] {escape(str(path))}")
    if copied:
        console.print(f"  [dim]Copied {len(copied)} file(s) from .grove.json config[/dim]")


def run_list(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    grove.show_worktrees(
        details=parsed_args.details,
        only_dirty=parsed_args.dirty,
        only_locked=parsed_args.locked,
        as_json=parsed_args.json,
    )


def run_go(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    # Bare path on stdout so it can be used as `cd "$(grove go name)"`
    print(grove.go(parsed_args.name))


def run_remove(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    removed = grove.remove(parsed_args.name, force=parsed_args.force)
    if removed is None:
        console.print("[blue]Operation cancelled.[/blue]")
        return
    console.print(f"[green]✓ Removed worktree:[/green] [bold]{escape(format_path_with_tilde(removed))}[/bold]")


def run_prune(parsed_args, config: Config) -> int:
    grove = Grove.discover(config=config, output=console)
    result = grove.prune(
        base=config.base_branch,
        older_than=config.older_than,
        dry_run=config.dry_run,
        force=config.force,
    )
    if result is not None and config.dry_run:
        console.print(
            "[blue]This was a dry run. Remove --dry-run flag to actually remove the worktrees.[/blue]"
        )
    return 0 if result is None or result.ok else 1


def run_sync(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    branch = grove.sync(parsed_args.branch)
    console.print(f"[green]✓ Synced[/green] [bold]{escape(branch)}[/bold] [dim]from origin[/dim]")


def run_pr(parsed_args, config: Config) -> None:
    grove = Grove.discover(config=config, output=console)
    console.print(f"[dim]Fetching PR #{parsed_args.number} information...[/dim]")
    path, created = grove.pr(parsed_args.number)

    if not created:
        console.print(f"[yellow]⚠ Worktree already exists:[/yellow] [bold]{escape(str(path))}[/bold]")
        return
    console.print(f"[green]✓ Created worktree for PR[/green] [bold]#{parsed_args.number}[/bold]")
    console.print(f"  [dim]Path:[/dim] {escape(str(path))}")
    console.print("\n[dim]To switch to this worktree, run:[/dim]")
    console.print(f"  [cyan]grove go {escape(path.name)}[/cyan]")


COMMANDS = {
    "init": run_init,
    "add": run_add,
    "list": run_list,
    "go": run_go,
    "remove": run_remove,
    "prune": run_prune,
    "sync": run_sync,
    "pr": run_pr,
}


def main(argv=None):
    """Main entry point for the application."""
    debug = False
    try:
        # Parse command line arguments
        parsed_args = parse_args(argv)
        debug = parsed_args.debug

        # Setup logging before creating Grove
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
        install_signal_handler()

        config = build_config(parsed_args)
        if parsed_args.debug:
            _print_debug_info(config)

        command = COMMAND_ALIASES.get(parsed_args.command, parsed_args.command)
        return COMMANDS[command](parsed_args, config) or 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
