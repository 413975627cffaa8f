"""Calendar management commands.

Every change is saved to the settings file and followed by a scan so the
item counts reflect the new configuration.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from loguru import logger
from rich.markup import escape
from rich.table import Table

from vault_calendar.cli.app import calendars_app
from vault_calendar.cli.commands.command_utils import (
    calendar_style,
    console,
    get_config,
    load_registry,
    save_registry,
    start_index_service,
)
from vault_calendar.extraction import preview_pattern
from vault_calendar.models import SourceType
from vault_calendar.services.exceptions import CalendarNotFoundError, ConfigurationError
from vault_calendar.sync.index_service import IndexService


def count_items(service: IndexService, calendar_id: str) -> int:
    return sum(
        1 for _, items in service.index.items() for item in items if item.calendar_id == calendar_id
    )


def fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(1)


async def apply_change(ctx: typer.Context, change) -> None:
    """Run change against a started index service, then persist the calendars."""
    config = get_config(ctx)
    settings, service = await start_index_service(config)
    try:
        await change(service)
    finally:
        await service.stop()
    save_registry(config, settings, service.registry)


def run_change(ctx: typer.Context, change) -> None:
    try:
        asyncio.run(apply_change(ctx, change))
    except CalendarNotFoundError as e:
        fail(str(e))
    except ValueError as e:
        fail(f"Invalid calendar change: {e}")


@calendars_app.command("list")
def list_calendars(ctx: typer.Context) -> None:
    """Show the configured calendars."""
    _, registry = load_registry(get_config(ctx))

    table = Table(title="Calendars")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Format")
    table.add_column("Source")
    table.add_column("Enabled")
    for calendar in registry:
        source = {
            SourceType.YAML: calendar.yaml_key,
            SourceType.INLINE: calendar.inline_pattern,
            SourceType.NOTE_HEADING: calendar.note_path,
        }.get(calendar.source_type)
        style = calendar_style(calendar)
        table.add_row(
            calendar.id,
            f"[{style}]{calendar.name}[/{style}]" if style else calendar.name,
            calendar.source_type.value,
            calendar.format,
            escape(source or ""),
            "[green]yes[/green]" if calendar.enabled else "[dim]no[/dim]",
        )
    console.print(table)


@calendars_app.command("add")
def add_calendar(
    ctx: typer.Context,
    name: str = typer.Option("New Calendar", "--name", help="Display name"),
    source_type: SourceType = typer.Option(SourceType.YAML, "--type", help="Where dates come from"),
    format: str = typer.Option("YYYY-MM-DD", "--format", help="Date format, dayjs tokens"),
    yaml_key: Optional[str] = typer.Option(None, "--yaml-key"),
    inline_pattern: Optional[str] = typer.Option(None, "--pattern"),
    inline_whitelist: Optional[str] = typer.Option(
        None, "--whitelist", help="Comma separated note paths"
    ),
    note_path: Optional[str] = typer.Option(None, "--note"),
    color: Optional[str] = typer.Option(None, "--color"),
) -> None:
    """Add a calendar."""
    fields: Dict[str, Any] = {
        key: value
        for key, value in {
            "yaml_key": yaml_key,
            "inline_pattern": inline_pattern,
            "inline_whitelist": inline_whitelist,
            "note_path": note_path,
            "color": color,
        }.items()
        if value is not None
    }

    async def change(service: IndexService) -> None:
        calendar = await service.add_calendar(name, source_type, format, **fields)
        console.print(
            f"[green]Added calendar {calendar.id}[/green] "
            f"({count_items(service, calendar.id)} items)"
        )

    run_change(ctx, change)


@calendars_app.command("update")
def update_calendar(
    ctx: typer.Context,
    calendar_id: str = typer.Argument(..., help="Calendar id"),
    name: Optional[str] = typer.Option(None, "--name"),
    format: Optional[str] = typer.Option(None, "--format"),
    yaml_key: Optional[str] = typer.Option(None, "--yaml-key"),
    inline_pattern: Optional[str] = typer.Option(None, "--pattern"),
    inline_whitelist: Optional[str] = typer.Option(None, "--whitelist"),
    note_path: Optional[str] = typer.Option(None, "--note"),
    color: Optional[str] = typer.Option(None, "--color"),
) -> None:
    """Change fields of a calendar."""
    changes = {
        key: value
        for key, value in {
            "name": name,
            "format": format,
            "yaml_key": yaml_key,
            "inline_pattern": inline_pattern,
            "inline_whitelist": inline_whitelist,
            "note_path": note_path,
            "color": color,
        }.items()
        if value is not None
    }
    if not changes:
        fail("Nothing to update")

    async def change(service: IndexService) -> None:
        rebuilt = await service.update_calendar(calendar_id, **changes)
        note = f"{count_items(service, calendar_id)} items" if rebuilt else "display only"
        console.print(f"[green]Updated calendar {calendar_id}[/green] ({note})")

    run_change(ctx, change)


def toggle(ctx: typer.Context, calendar_id: str, enabled: bool) -> None:
    async def change(service: IndexService) -> None:
        changed = await service.set_calendar_enabled(calendar_id, enabled)
        state = "enabled" if enabled else "disabled"
        if changed:
            console.print(f"[green]Calendar {calendar_id} {state}[/green]")
        else:
            console.print(f"[yellow]Calendar {calendar_id} already {state}[/yellow]")

    run_change(ctx, change)


@calendars_app.command("enable")
def enable_calendar(ctx: typer.Context, calendar_id: str = typer.Argument(...)) -> None:
    """Turn a calendar on."""
    toggle(ctx, calendar_id, True)


@calendars_app.command("disable")
def disable_calendar(ctx: typer.Context, calendar_id: str = typer.Argument(...)) -> None:
    """Turn a calendar off."""
    toggle(ctx, calendar_id, False)


@calendars_app.command("remove")
def remove_calendar(ctx: typer.Context, calendar_id: str = typer.Argument(...)) -> None:
    """Delete a calendar and its items."""

    async def change(service: IndexService) -> None:
        calendar = await service.remove_calendar(calendar_id)
        console.print(f"[green]Removed calendar {calendar.id}[/green] ({calendar.name})")

    run_change(ctx, change)


@calendars_app.command("test")
def test_calendar(
    ctx: typer.Context,
    calendar_id: str = typer.Argument(..., help="Id of an inline calendar"),
    sample: Optional[str] = typer.Argument(None, help="Text to match, defaults to the saved sample"),
    file: Optional[Path] = typer.Option(None, "--file", help="Read the sample from a file"),
) -> None:
    """Try an inline calendar's pattern against sample text."""
    config = get_config(ctx)
    settings, registry = load_registry(config)
    try:
        calendar = registry.get(calendar_id)
    except CalendarNotFoundError as e:
        fail(str(e))

    if file is not None:
        try:
            sample = file.read_text(encoding="utf-8")
        except OSError as e:
            fail(f"Could not read {file}: {e}")
    if sample is None:
        sample = calendar.test_pattern or ""
    else:
        registry.update(calendar_id, test_pattern=sample)
        save_registry(config, settings, registry)

    try:
        matches = preview_pattern(calendar, sample)
    except ConfigurationError as e:
        logger.warning(f"Calendar {calendar_id} cannot be tested: {e}")
        fail(f"Invalid calendar configuration: {e}")

    if not matches:
        console.print("[yellow]No lines matched[/yellow]")
        return

    table = Table(title=f"Matches for {calendar.name}")
    table.add_column("Line", justify="right")
    table.add_column("Text")
    table.add_column("Date")
    for match in matches:
        table.add_row(
            str(match.line_number),
            escape(match.line),
            match.date or "[red]unparsed[/red]",
        )
    console.print(table)
