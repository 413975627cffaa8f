"""utility functions for commands"""

from datetime import date
from typing import Optional

import typer
from rich.color import Color, ColorParseError
from rich.console import Console

from vault_calendar.config import ConfigManager, ProjectConfig
from vault_calendar.models import CalendarConfig, PluginSettings
from vault_calendar.registry import CalendarRegistry
from vault_calendar.services.document_store import DocumentStore
from vault_calendar.sync.index_service import IndexService

console = Console()


def get_config(ctx: typer.Context) -> ProjectConfig:
    return ctx.obj if isinstance(ctx.obj, ProjectConfig) else ProjectConfig()


def load_registry(config: ProjectConfig) -> tuple[PluginSettings, CalendarRegistry]:
    settings = ConfigManager(config).load()
    return settings, CalendarRegistry(settings.calendars)


def save_registry(config: ProjectConfig, settings: PluginSettings, registry: CalendarRegistry):
    ConfigManager(config).save(PluginSettings(settings=settings.settings, calendars=list(registry)))


async def start_index_service(config: ProjectConfig) -> tuple[PluginSettings, IndexService]:
    """Load settings and build the index over the vault."""
    settings, registry = load_registry(config)
    store = DocumentStore(config.home, extensions=config.extensions)
    service = IndexService(store, registry)
    await service.start()
    return settings, service


def parse_day(value: Optional[str]) -> date:
    """ISO date from the command line, today when omitted."""
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Expected a date like 2024-03-05, got {value!r}")


def calendar_style(calendar: Optional[CalendarConfig]) -> str:
    """Rich style for a calendar's color, plain when it has none or it is not a color."""
    if calendar is None or not calendar.color:
        return ""
    try:
        Color.parse(calendar.color)
    except ColorParseError:
        return ""
    return calendar.color
