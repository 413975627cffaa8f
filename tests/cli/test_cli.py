"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from vault_calendar.cli.main import app

runner = CliRunner()


def create_test_file(path: Path, content: str = "test content") -> None:
    """Create a test file with given content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def cli_vault(vault, monkeypatch):
    monkeypatch.delenv("VAULT_CALENDAR_HOME", raising=False)
    create_test_file(vault / "2024-03-05.md", "- 202403051200: meeting notes\n")
    create_test_file(vault / "trip.md", "---\ncreated: 2024-03-05 09:30:00\n---\n")
    return vault


def invoke(vault: Path, *args: str):
    return runner.invoke(app, ["--home", str(vault), *args])


def test_scan(cli_vault):
    result = invoke(cli_vault, "scan")

    assert result.exit_code == 0, result.output
    assert "Default Calendar" in result.output
    assert "Indexed 2 items on 1 days" in result.output


def test_day(cli_vault):
    result = invoke(cli_vault, "day", "2024-03-05")

    assert result.exit_code == 0, result.output
    assert "Tue, 05 Mar 2024" in result.output
    assert "trip" in result.output
    assert "meeting notes" in result.output
    assert "2024-03-05.md:1" in result.output


def test_day_rejects_bad_date(cli_vault):
    result = invoke(cli_vault, "day", "05/03/2024")
    assert result.exit_code != 0


def test_week_and_month(cli_vault):
    week = invoke(cli_vault, "week", "2024-03-07")
    assert week.exit_code == 0, week.output
    assert "Tue, 05 Mar 2024" in week.output

    month = invoke(cli_vault, "month", "2024-03")
    assert month.exit_code == 0, month.output
    assert "March 2024" in month.output
    assert "••" in month.output


def test_calendar_lifecycle(cli_vault):
    added = invoke(
        cli_vault, "calendars", "add", "--name", "Daily", "--type", "filename", "--format", "YYYY-MM-DD"
    )
    assert added.exit_code == 0, added.output
    assert "Added calendar" in added.output

    settings_path = cli_vault / ".vault-calendar" / "settings.json"
    calendars = json.loads(settings_path.read_text())["calendars"]
    assert [c["name"] for c in calendars] == ["Default Calendar", "Inline Timestamps", "Daily"]
    calendar_id = calendars[-1]["id"]

    listed = invoke(cli_vault, "calendars", "list")
    assert "Daily" in listed.output

    disabled = invoke(cli_vault, "calendars", "disable", calendar_id)
    assert disabled.exit_code == 0, disabled.output
    assert json.loads(settings_path.read_text())["calendars"][-1]["enabled"] is False

    updated = invoke(cli_vault, "calendars", "update", calendar_id, "--name", "Journal")
    assert updated.exit_code == 0, updated.output
    assert json.loads(settings_path.read_text())["calendars"][-1]["name"] == "Journal"

    removed = invoke(cli_vault, "calendars", "remove", calendar_id)
    assert removed.exit_code == 0, removed.output
    assert len(json.loads(settings_path.read_text())["calendars"]) == 2


def test_unknown_calendar(cli_vault):
    result = invoke(cli_vault, "calendars", "enable", "missing")
    assert result.exit_code == 1


def test_calendar_test_command(cli_vault):
    result = invoke(
        cli_vault, "calendars", "test", "inline-timestamp", "--", "- 202403051200: standup\nother"
    )

    assert result.exit_code == 0, result.output
    assert "2024-03-05" in result.output
    settings = json.loads((cli_vault / ".vault-calendar" / "settings.json").read_text())
    assert settings["calendars"][1]["testPattern"].startswith("- 202403051200")


def test_calendar_test_rejects_invalid_pattern(cli_vault):
    invoke(cli_vault, "calendars", "update", "inline-timestamp", "--pattern", "no group")
    result = invoke(cli_vault, "calendars", "test", "inline-timestamp", "no group here")
    assert result.exit_code == 1
