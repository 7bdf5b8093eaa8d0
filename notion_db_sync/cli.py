"""
Notion Database → Markdown Sync CLI

Usage:
    notion-db-sync                  # Run sync, choosing files interactively
    notion-db-sync sync --yes       # Sync every matching record
    notion-db-sync sync --show-diff # Print diffs of overwritten files
    notion-db-sync refresh          # Rebuild property mappings from Notion
    notion-db-sync check            # Test the connection to the database
    notion-db-sync status           # Show configuration
    notion-db-sync templates        # List candidate template files
"""

import sys
import traceback

import click
from rich.console import Console
from rich.table import Table

from notion_db_sync import __version__
from notion_db_sync.config import Config
from notion_db_sync.exceptions import SyncAbortedError
from notion_db_sync.report import print_candidates, print_result
from notion_db_sync.storage import VaultStorage
from notion_db_sync.sync_engine import FileSelectionItem, SyncEngine

console = Console()


def _fail(ctx: click.Context, error: Exception) -> None:
    if isinstance(error, ValueError):
        console.print(f"[red]Configuration error:[/red] {error}")
    else:
        console.print(f"[red]Error:[/red] {error}")
        if ctx.obj.get("debug"):
            traceback.print_exc()
    sys.exit(1)


def _select_interactively(
    items: list[FileSelectionItem],
    overwrite: bool,
) -> list[FileSelectionItem]:
    """Ask which files to sync and whether to overwrite existing ones."""
    approved = []
    for item in items:
        item.selected = click.confirm(f"Sync '{item.filename}'?", default=True)
        if not item.selected:
            continue
        if item.exists:
            item.overwrite = overwrite and click.confirm(
                f"  '{item.filename}' already exists. Overwrite?", default=True
            )
        approved.append(item)
    return approved


@click.group(invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx, debug: bool):
    """
    Notion Database → Markdown Sync

    Pulls the records of a Notion database into Markdown files.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    # If no subcommand, run sync
    if ctx.invoked_subcommand is None:
        ctx.invoke(sync)


@cli.command()
@click.option("--yes", is_flag=True, help="Sync every matching record without asking")
@click.option("--no-overwrite", is_flag=True, help="Leave existing files untouched")
@click.option("--show-diff", is_flag=True, help="Print diffs of overwritten files")
@click.pass_context
def sync(ctx, yes: bool = False, no_overwrite: bool = False, show_diff: bool = False):
    """Run synchronization from Notion to the vault."""
    try:
        config = Config.from_env()
        if ctx.obj.get("debug"):
            config.debug = True

        engine = SyncEngine(config)
        plan = engine.prepare()

        if plan.is_empty:
            console.print("[yellow]No records match the sync rules.[/yellow]")
            return

        print_candidates(plan)

        if yes:
            for item in plan.items:
                item.overwrite = not no_overwrite
            approved = plan.items
        else:
            approved = _select_interactively(plan.items, overwrite=not no_overwrite)

        if not approved:
            console.print("[yellow]No files selected.[/yellow]")
            return

        result = engine.execute(approved, plan.skipped_count)

        console.print(f"[green]Sync complete.[/green] {result.summary}")
        print_result(result, show_diff=show_diff)

    except SyncAbortedError as e:
        console.print(f"[red]Sync aborted:[/red] {e}")
        console.print("[yellow]Files written before the failure were kept:[/yellow]")
        print_result(e.partial_result)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled.[/yellow]")
        sys.exit(130)
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.pass_context
def refresh(ctx):
    """Rebuild property mappings from the database schema."""
    try:
        config = Config.from_env()
        engine = SyncEngine(config)
        mappings = engine.refresh_mappings()
        config.save_settings()
    except Exception as e:
        _fail(ctx, e)
        return

    console.print(f"[green]Loaded {len(mappings)} properties.[/green]")


@cli.command()
@click.pass_context
def check(ctx):
    """Test the connection to the Notion database."""
    try:
        config = Config.from_env()
        schema = SyncEngine(config).retrieve_schema()
    except Exception as e:
        _fail(ctx, e)
        return

    console.print(
        f"[green]Connected.[/green] Database: {schema.title or 'Untitled'} "
        f"({len(schema.properties)} properties)"
    )


@cli.command()
@click.pass_context
def status(ctx):
    """Show current configuration."""
    try:
        config = Config.from_env()
    except Exception as e:
        _fail(ctx, e)
        return

    console.print("\n[bold]Sync Configuration[/bold]\n")
    console.print(f"Database:          {config.database_id or '[red](not set)[/red]'}")
    console.print(f"Token:             {'set' if config.notion_token else '[red](not set)[/red]'}")
    console.print(f"Sync folder:       {config.sync_folder}")
    console.print(f"Filename property: {config.filename_property}")
    console.print(f"Template file:     {config.template_file_path or '(inline template)'}")

    if config.property_mappings:
        table = Table(title="Property Mappings")
        table.add_column("Notion property", style="cyan")
        table.add_column("Type", style="dim")
        table.add_column("Field", style="green")
        table.add_column("Enabled")
        table.add_column("Template")

        for mapping in config.property_mappings:
            table.add_row(
                mapping.notion_property,
                mapping.notion_type,
                mapping.local_field,
                "✓" if mapping.enabled else "✗",
                "✓" if mapping.is_template_variable else "✗",
            )

        console.print(table)
    else:
        console.print("\n[yellow]No property mappings. Run 'notion-db-sync refresh'.[/yellow]")

    if config.sync_rules:
        console.print("\n[bold]Sync rules[/bold] (all must match)")
        for rule in config.sync_rules:
            value = f" {rule.value}" if rule.value is not None else ""
            console.print(f"  {rule.property} {rule.condition}{value}")


@cli.command()
@click.pass_context
def templates(ctx):
    """List Markdown files usable as templates."""
    try:
        config = Config.from_env()
    except Exception as e:
        _fail(ctx, e)
        return

    files = VaultStorage(config.vault_root).list(suffix=".md")
    if not files:
        console.print("[yellow]No Markdown files found in the vault.[/yellow]")
        return

    for path in files:
        marker = " [green](current)[/green]" if path == config.template_file_path else ""
        console.print(f"{path}{marker}")


@cli.command()
def version():
    """Show version information."""
    console.print(f"Notion Database Sync v{__version__}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
