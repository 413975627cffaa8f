"""Day, week and month views of the index."""

import asyncio
import calendar as month_calendar
from datetime import date
from typing import Dict, Optional

import typer
from loguru import logger
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from vault_calendar.cli.app import app
from vault_calendar.cli.commands.command_utils import (
    calendar_style,
    console,
    get_config,
    parse_day,
    start_index_service,
)
from vault_calendar.models import CalendarType, DisplaySettings
from vault_calendar.presentation import DayListing, day_listing, month_counts, week_listing, week_start
from vault_calendar.registry import CalendarRegistry

MAX_DOTS = 2


def build_day_tree(listing: DayListing, registry: CalendarRegistry) -> Tree:
    """Tree of one day's items, one branch per kind."""
    tree = Tree(f"[bold]{listing.label}[/bold]")
    if not listing.total:
        tree.add("[dim]Nothing on this day[/dim]")
        return tree

    def branch(title: str, items, show_line: bool = False):
        if not items:
            return
        node = tree.add(f"[bold]{title}[/bold] ({len(items)})")
        for item in items:
            style = calendar_style(registry.find(item.calendar_id or ""))
            location = f"{item.path}:{item.line_number}" if show_line else item.path
            name = escape(item.display_name)
            label = f"[{style}]{name}[/{style}]" if style else name
            node.add(f"{label} [dim]{escape(location)}[/dim]")

    branch("Notes", listing.notes)
    branch("Reminders", listing.reminders)
    branch("Timestamps", listing.inline_timestamps, show_line=True)
    branch("Headings", listing.headings, show_line=True)
    return tree


def dots(count: int) -> str:
    """Marker for a day cell: one dot per item, then the overflow."""
    if count <= MAX_DOTS:
        return "•" * count
    return "•" * MAX_DOTS + f"+{count - MAX_DOTS}"


def build_month_table(
    year: int, month: int, counts: Dict[date, int], settings: DisplaySettings
) -> Table:
    first_weekday = 6 if settings.calendar_type == CalendarType.US else 0
    weeks = month_calendar.Calendar(firstweekday=first_weekday).monthdatescalendar(year, month)
    day_names = [month_calendar.day_abbr[(first_weekday + i) % 7] for i in range(7)]

    table = Table(title=date(year, month, 1).strftime("%B %Y"), show_lines=True)
    if settings.show_week_numbers:
        table.add_column("Wk", style="dim", justify="right")
    for name in day_names:
        table.add_column(name, justify="center")

    today = date.today()
    for week in weeks:
        cells = []
        for day in week:
            if day.month != month:
                cells.append("")
                continue
            number = f"[reverse]{day.day}[/reverse]" if day == today else str(day.day)
            cells.append(f"{number}\n{dots(counts.get(day, 0))}")
        if settings.show_week_numbers:
            # ISO week of the week's Thursday for ISO layouts, of its first day for US ones
            anchor = week[3] if first_weekday == 0 else week[0]
            cells.insert(0, str(anchor.isocalendar()[1]))
        table.add_row(*cells)
    return table


def parse_month(value: Optional[str]) -> tuple[int, int]:
    if not value:
        today = date.today()
        return today.year, today.month
    try:
        first = date.fromisoformat(f"{value}-01")
    except ValueError:
        raise typer.BadParameter(f"Expected a month like 2024-03, got {value!r}")
    return first.year, first.month


async def show_day(ctx: typer.Context, day: date) -> None:
    settings, service = await start_index_service(get_config(ctx))
    listing = day_listing(service.index, day, settings.settings.sorting_option)
    console.print(build_day_tree(listing, service.registry))
    await service.stop()


async def show_week(ctx: typer.Context, day: date) -> None:
    settings, service = await start_index_service(get_config(ctx))
    display = settings.settings
    start = week_start(day, display.calendar_type)
    listings = week_listing(service.index, start, display.sorting_option)
    if not listings:
        console.print(f"[yellow]Nothing in the week of {start.isoformat()}[/yellow]")
    for listing in listings:
        console.print(build_day_tree(listing, service.registry))
    await service.stop()


async def show_month(ctx: typer.Context, year: int, month: int) -> None:
    settings, service = await start_index_service(get_config(ctx))
    counts = month_counts(service.index, year, month)
    console.print(build_month_table(year, month, counts, settings.settings))
    await service.stop()


def run_view(coro, name: str) -> None:
    try:
        asyncio.run(coro)
    except Exception as e:
        logger.exception(f"{name} view failed")
        typer.echo(f"Error showing {name}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def day(
    ctx: typer.Context,
    when: Optional[str] = typer.Argument(None, help="Date as YYYY-MM-DD, today when omitted"),
) -> None:
    """List the notes on a day."""
    run_view(show_day(ctx, parse_day(when)), "day")


@app.command()
def week(
    ctx: typer.Context,
    when: Optional[str] = typer.Argument(None, help="Any date in the week, today when omitted"),
) -> None:
    """List the notes of a week, skipping empty days."""
    run_view(show_week(ctx, parse_day(when)), "week")


@app.command()
def month(
    ctx: typer.Context,
    when: Optional[str] = typer.Argument(None, help="Month as YYYY-MM, the current one when omitted"),
) -> None:
    """Show a month grid with a dot per item."""
    year, month_number = parse_month(when)
    run_view(show_month(ctx, year, month_number), "month")
