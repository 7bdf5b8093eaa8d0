"""
Console reporting for sync runs.

Renders the candidate list, the result summary and per-file diffs
with rich.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from notion_db_sync.diff import DiffTag, diff_stats
from notion_db_sync.sync_engine import SyncPlan, SyncResult, UpdatedFile

console = Console()


def print_candidates(plan: SyncPlan) -> None:
    """Print the files a sync would write."""
    table = Table(
        title=f"Files to sync into {plan.folder}",
        caption=f"{len(plan.items)} files, {plan.existing_count} already exist",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Status", style="yellow")

    for index, item in enumerate(plan.items, start=1):
        status = "exists" if item.exists else "new"
        table.add_row(str(index), item.filename, status)

    console.print(table)


def print_diff(updated: UpdatedFile) -> None:
    """Print a coloured line diff for an overwritten file."""
    lines = updated.diff()
    added, removed = diff_stats(lines)

    console.print(f"\n[bold]Diff: {updated.filename}[/bold] [green]+{added}[/green] [red]-{removed}[/red]")

    for line in lines:
        if line.tag == DiffTag.ADDED:
            console.print(Text(f"+ {line.value}", style="green"))
        elif line.tag == DiffTag.REMOVED:
            console.print(Text(f"- {line.value}", style="red"))
        else:
            console.print(Text(f"  {line.value}", style="dim"))


def print_result(result: SyncResult, show_diff: bool = False) -> None:
    """Print sync summary."""
    console.print("\n" + "=" * 50)
    console.print("[bold]Sync Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Files created", str(len(result.created)))
    table.add_row("Files updated", str(len(result.updated)))
    table.add_row("Unchanged", str(result.unchanged_count))
    table.add_row("Skipped by rules", str(result.skipped_count))

    console.print(table)

    if result.created:
        console.print(f"\n[green]Created:[/green] {', '.join(result.created)}")

    if result.updated:
        names = [
            u.filename if u.changed else f"{u.filename} (no changes)"
            for u in result.updated
        ]
        console.print(f"\n[blue]Updated:[/blue] {', '.join(names)}")

    if show_diff:
        for updated in result.updated:
            if updated.changed:
                print_diff(updated)

    console.print("")
