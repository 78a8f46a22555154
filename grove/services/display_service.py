"""Display and formatting service for worktree information"""
import json
import shutil
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from grove.constants import CLI_COLORS, LEGEND_TEXT
from grove.formatters import (
    format_created_time,
    format_path_with_tilde,
    format_removal_items,
    format_worktree_status,
    format_worktree_symbols,
    get_worktree_style_type,
    truncate_path,
)
from grove.models.prune import AgePolicy, MergePolicy, PruneCandidate, PrunePolicy, RemovalResult
from grove.models.worktree import WorktreeRecord
from grove.utils.logging import get_logger

logger = get_logger(__name__)


def should_include_worktree(worktree: WorktreeRecord, only_dirty: bool = False, only_locked: bool = False) -> bool:
    """Apply `grove list --dirty/--locked` filters."""
    if only_dirty and not worktree.is_dirty:
        return False
    if only_locked and not worktree.is_locked:
        return False
    return True


class DisplayService:
    def __init__(self, console: Optional[Console] = None, verbose: bool = False, debug: bool = False):
        self.console = console or Console()
        self.verbose = verbose
        self.debug_mode = debug

    def _column_widths(self) -> tuple[int, int]:
        width = self.console.width or shutil.get_terminal_size().columns
        return max(20, width // 2), max(15, width * 3 // 10)

    def _print_worktree_line(self, worktree: WorktreeRecord) -> None:
        path_width, branch_width = self._column_widths()
        path = truncate_path(format_path_with_tilde(worktree.path), path_width)
        branch_text = f"[{worktree.branch}]{format_worktree_symbols(worktree)}"
        color = CLI_COLORS.get(get_worktree_style_type(worktree))

        self.console.print(
            f"{escape(path.ljust(path_width))}  "
            f"[{color}]{escape(branch_text.ljust(branch_width))}[/{color}]  "
            f"[dim]{format_created_time(worktree.created_at)}[/dim]",
            highlight=False,
        )

    def display_worktree_list(
        self,
        worktrees: Iterable[WorktreeRecord],
        only_dirty: bool = False,
        only_locked: bool = False,
    ) -> int:
        """Print worktrees as they arrive. Returns the number printed."""
        self.console.print(f"[dim]{LEGEND_TEXT}[/dim]\n", highlight=False)

        found_any = False
        shown = 0
        for worktree in worktrees:
            found_any = True
            if not should_include_worktree(worktree, only_dirty, only_locked):
                continue
            shown += 1
            self._print_worktree_line(worktree)

        if not found_any:
            self.console.print("[yellow]No worktrees found.[/yellow]")
        elif not shown:
            self.console.print("[yellow]No worktrees found matching the criteria.[/yellow]")
        return shown

    def display_worktree_table(self, worktrees: Sequence[WorktreeRecord]) -> None:
        """Display a table of worktree information (`grove list --details`)."""
        if not worktrees:
            self.console.print("[yellow]No worktrees found matching the criteria.[/yellow]")
            return

        table = Table()
        for label in ("Branch", "Path", "Status", "Created", "HEAD"):
            table.add_column(label)

        for worktree in worktrees:
            row_style = CLI_COLORS.get(get_worktree_style_type(worktree))
            table.add_row(
                escape(worktree.branch),
                escape(format_path_with_tilde(worktree.path)),
                format_worktree_status(worktree),
                format_created_time(worktree.created_at),
                worktree.head[:8],
                style=row_style,
            )

        self.console.print(table)

    def display_json(
        self, worktrees: Iterable[WorktreeRecord], only_dirty: bool = False, only_locked: bool = False
    ) -> None:
        """Print worktrees as a JSON array for scripting."""
        data = [wt.to_dict() for wt in worktrees if should_include_worktree(wt, only_dirty, only_locked)]
        # Plain print keeps the output parseable (no markup or wrapping)
        print(json.dumps(data, indent=2))

    def display_prune_candidates(self, candidates: Sequence[PruneCandidate], policy: PrunePolicy) -> None:
        """List what a prune run would remove."""
        if isinstance(policy, MergePolicy):
            self.console.print(f"Worktrees merged into [bold]{escape(policy.base)}[/bold]:")
        elif isinstance(policy, AgePolicy):
            threshold = policy.threshold or policy.cutoff.isoformat()
            self.console.print(f"Worktrees older than [bold]{escape(threshold)}[/bold]:")
        self.console.print(escape(format_removal_items(candidates)), highlight=False)

        dirty_count = sum(1 for c in candidates if c.worktree.is_dirty)
        if dirty_count:
            self.console.print(
                f"\n[yellow]⚠ {dirty_count} worktree(s) have uncommitted changes[/yellow]"
            )

    def display_removal_result(self, result: RemovalResult, dry_run: bool = False) -> None:
        """Summarize a removal batch."""
        if dry_run:
            self.console.print(f"\n[cyan]Dry run: would remove {len(result.would_remove)} worktree(s)[/cyan]")
            for path in result.would_remove:
                marker = " (uncommitted changes, needs --force)" if path in result.skipped_dirty else ""
                self.console.print(f"  {escape(format_path_with_tilde(path))}{marker}", highlight=False)
            return

        for path in result.removed:
            self.console.print(f"[green]✓ Removed {escape(format_path_with_tilde(path))}[/green]")
        for path, message in result.failed:
            self.console.print(f"[red]✗ Failed to remove {escape(path)}: {escape(message)}[/red]")
        for path in result.skipped_dirty:
            self.console.print(
                f"[yellow]Skipped {escape(path)}: uncommitted changes (use --force)[/yellow]"
            )
        if result.interrupted:
            self.console.print("[yellow]Interrupted before all worktrees were removed[/yellow]")

        self.console.print(
            f"\nRemoved {len(result.removed)} worktree(s)"
            + (f", {len(result.failed)} failed" if result.failed else "")
            + (f", {len(result.skipped_dirty)} skipped" if result.skipped_dirty else "")
        )
