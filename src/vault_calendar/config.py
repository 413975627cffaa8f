"""Configuration management for vault-calendar."""

from pathlib import Path
from typing import List

from loguru import logger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vault_calendar.models import PluginSettings

STATE_DIR_NAME = ".vault-calendar"
SETTINGS_FILE_NAME = "settings.json"
STATUS_FILE_NAME = "watch-status.json"
LOG_FILE_NAME = "vault-calendar.log"


class ProjectConfig(BaseSettings):
    """Configuration for one vault."""

    home: Path = Field(
        default_factory=Path.cwd,
        description="Root directory of the vault",
    )
    sync_delay: int = Field(
        default=500,
        description="Milliseconds to wait for more file changes before handling a batch",
        gt=0,
    )
    log_level: str = "INFO"
    extensions: List[str] = Field(
        default_factory=lambda: [".md"],
        description="File extensions of tracked notes",
    )

    model_config = SettingsConfigDict(
        env_prefix="VAULT_CALENDAR_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def state_dir(self) -> Path:
        """Directory for settings, status and logs, hidden from the index."""
        return self.home / STATE_DIR_NAME

    @property
    def settings_path(self) -> Path:
        return self.state_dir / SETTINGS_FILE_NAME

    @property
    def status_path(self) -> Path:
        return self.state_dir / STATUS_FILE_NAME

    @property
    def log_path(self) -> Path:
        return self.state_dir / LOG_FILE_NAME

    @field_validator("home")
    @classmethod
    def ensure_path_exists(cls, v: Path) -> Path:
        """Ensure vault path exists."""
        v = v.expanduser().resolve()
        if not v.exists():
            v.mkdir(parents=True)
        return v


class ConfigManager:
    """Loads and saves the persisted settings blob ``{settings, calendars}``."""

    def __init__(self, config: ProjectConfig):
        self.config = config

    @property
    def path(self) -> Path:
        return self.config.settings_path

    def load(self) -> PluginSettings:
        """Load settings, falling back to defaults when missing or invalid."""
        if not self.path.exists():
            logger.debug(f"No settings at {self.path}, using defaults")
            return PluginSettings()
        try:
            return PluginSettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error(f"Failed to load settings from {self.path}: {e}")
            return PluginSettings()

    def save(self, settings: PluginSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            settings.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            encoding="utf-8",
        )
        logger.debug(f"Saved settings to {self.path}")
