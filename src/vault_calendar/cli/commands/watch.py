"""Watch command: keep the index current while notes change."""

import asyncio

import typer
from loguru import logger

from vault_calendar.cli.app import app
from vault_calendar.cli.commands.command_utils import console, get_config, start_index_service
from vault_calendar.config import ProjectConfig
from vault_calendar.sync import WatchService


async def run_watch(config: ProjectConfig) -> None:
    _, service = await start_index_service(config)
    console.print(
        f"Watching [bold]{config.home}[/bold]: "
        f"{service.index.total_items} items on {len(service.index)} days"
    )
    watch_service = WatchService(index_service=service, config=config)
    try:
        await watch_service.run()
    finally:
        await service.stop()


@app.command()
def watch(ctx: typer.Context) -> None:
    """Index the vault, then follow file changes until interrupted."""
    config = get_config(ctx)
    try:
        asyncio.run(run_watch(config))
    except KeyboardInterrupt:
        console.print("Stopped")
    except Exception as e:
        logger.exception("Watch failed")
        typer.echo(f"Error while watching: {e}", err=True)
        raise typer.Exit(1)
