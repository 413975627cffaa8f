from pathlib import Path
from typing import Optional

import typer

from vault_calendar.config import ProjectConfig
from vault_calendar.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import vault_calendar

        typer.echo(f"vault-calendar version: {vault_calendar.__version__}")
        raise typer.Exit()


app = typer.Typer(name="vault-calendar")


@app.callback()
def app_callback(
    ctx: typer.Context,
    home: Optional[Path] = typer.Option(
        None,
        "--home",
        help="Root directory of the vault",
        envvar="VAULT_CALENDAR_HOME",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log progress to the console.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """vault-calendar - notes of a markdown vault, by day."""
    config = ProjectConfig(home=home) if home else ProjectConfig()
    ctx.obj = config

    setup_logging(
        level=config.log_level,
        console_level="DEBUG" if verbose else "WARNING",
        log_file=str(config.log_path),
    )


calendars_app = typer.Typer(help="Manage calendars")
app.add_typer(calendars_app, name="calendars")
