"""Main CLI entry point for vault-calendar."""  # pragma: no cover

from vault_calendar.cli.app import app  # pragma: no cover

# Register commands
from vault_calendar.cli.commands import (  # noqa: F401  # pragma: no cover
    calendars,
    day,
    scan,
    watch,
)

if __name__ == "__main__":  # pragma: no cover
    app()
