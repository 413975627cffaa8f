"""Scan command: build the index and summarize it."""

import asyncio
from collections import Counter

import typer
from loguru import logger
from rich.table import Table

from vault_calendar.cli.app import app
from vault_calendar.cli.commands.command_utils import console, get_config, start_index_service
from vault_calendar.index import DateIndex
from vault_calendar.registry import CalendarRegistry


def display_summary(index: DateIndex, registry: CalendarRegistry) -> None:
    """Items per calendar, then totals."""
    counts = Counter(item.calendar_id for _, items in index.items() for item in items)

    table = Table(title="Calendars")
    table.add_column("Calendar")
    table.add_column("Type")
    table.add_column("Enabled")
    table.add_column("Items", justify="right")
    for calendar in registry:
        table.add_row(
            calendar.name,
            calendar.source_type.value,
            "[green]yes[/green]" if calendar.enabled else "[dim]no[/dim]",
            str(counts.get(calendar.id, 0)),
        )
    console.print(table)

    if index.total_items == 0:
        console.print("[yellow]No dated notes found[/yellow]")
        return
    dates = index.dates()
    console.print(
        f"Indexed {index.total_items} items on {len(dates)} days ({dates[0]} to {dates[-1]})"
    )


async def run_scan(ctx: typer.Context) -> None:
    config = get_config(ctx)
    _, service = await start_index_service(config)
    display_summary(service.index, service.registry)
    await service.stop()


@app.command()
def scan(ctx: typer.Context) -> None:
    """Index the vault and show what each calendar found."""
    try:
        asyncio.run(run_scan(ctx))
    except Exception as e:
        if not isinstance(e, typer.Exit):
            logger.exception("Scan failed")
            typer.echo(f"Error during scan: {e}", err=True)
            raise typer.Exit(1)
        raise
