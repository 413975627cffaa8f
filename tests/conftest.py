"""Common test fixtures."""

from pathlib import Path

import pytest
import pytest_asyncio

from vault_calendar.config import ProjectConfig
from vault_calendar.index import DateIndex
from vault_calendar.models import CalendarConfig, SourceType
from vault_calendar.registry import CalendarRegistry
from vault_calendar.services.document_store import DocumentStore
from vault_calendar.sync.index_service import IndexService


@pytest.fixture
def vault(tmp_path) -> Path:
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def test_config(vault, monkeypatch) -> ProjectConfig:
    """Config pointing at the temporary vault, isolated from the environment."""
    monkeypatch.delenv("VAULT_CALENDAR_HOME", raising=False)
    monkeypatch.delenv("VAULT_CALENDAR_SYNC_DELAY", raising=False)
    return ProjectConfig(home=vault, sync_delay=10)


@pytest.fixture
def filename_calendar() -> CalendarConfig:
    return CalendarConfig(
        id="daily",
        name="Daily notes",
        source_type=SourceType.FILENAME,
        format="YYYY-MM-DD",
    )


@pytest.fixture
def yaml_calendar() -> CalendarConfig:
    return CalendarConfig(
        id="due",
        name="Due dates",
        source_type=SourceType.YAML,
        format="YYYY-MM-DD",
        yaml_key="due",
    )


@pytest.fixture
def inline_calendar() -> CalendarConfig:
    return CalendarConfig(
        id="inline",
        name="Inline timestamps",
        source_type=SourceType.INLINE,
        format="YYYYMMDDHHmm",
        inline_pattern=r"^-\s+(\d{12}):",
    )


@pytest.fixture
def heading_calendar() -> CalendarConfig:
    return CalendarConfig(
        id="log",
        name="Log",
        source_type=SourceType.NOTE_HEADING,
        format="YYYY-MM-DD",
        note_path="log.md",
    )


@pytest.fixture
def registry(filename_calendar, yaml_calendar, inline_calendar, heading_calendar) -> CalendarRegistry:
    return CalendarRegistry([filename_calendar, yaml_calendar, inline_calendar, heading_calendar])


@pytest.fixture
def store(vault) -> DocumentStore:
    return DocumentStore(vault)


@pytest.fixture
def index() -> DateIndex:
    return DateIndex()


@pytest_asyncio.fixture
async def index_service(store, registry, index) -> IndexService:
    service = IndexService(store, registry, index)
    await service.start()
    yield service
    await service.stop()
