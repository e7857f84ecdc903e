"""Configuration management for the Aether character engine.

Settings are read from environment variables and an optional ``.env``
file through pydantic-settings.

Example:
    >>> from aether_sheet.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.max_level
    20

Environment Variables:
    AETHER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    AETHER_DATABASE_PATH: Path to the SQLite character store
    AETHER_CATALOG_PATH: Path to a JSON reference catalog
    AETHER_RULES_MAX_LEVEL: Highest character level a level-up may reach
    AETHER_RULES_DEFAULT_HP_METHOD: "average" or "roll"
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aether_sheet.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for persisted data locations.

    Attributes:
        database_path: Path to the SQLite character store.
        catalog_path: Optional JSON file holding the reference catalog.
    """

    model_config = SettingsConfigDict(
        env_prefix="AETHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/aether.db"),
        description="Path to SQLite character store",
    )
    catalog_path: Path | None = Field(
        default=None,
        description="Path to JSON reference catalog",
    )


class RulesSettings(BaseSettings):
    """Configuration for rules behaviour that tables alone don't decide.

    Attributes:
        max_level: Highest total character level.
        default_hp_method: HP method preselected when a level-up opens.
        prepared_caster_spell_count: Spell capacity used for prepared casters
            whose class data has no spells-known table.
    """

    model_config = SettingsConfigDict(
        env_prefix="AETHER_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_level: int = Field(
        default=20,
        ge=1,
        le=30,
        description="Highest total character level",
    )
    default_hp_method: Literal["average", "roll"] = Field(
        default="average",
        description="HP method preselected on level-up",
    )
    prepared_caster_spell_count: int = Field(
        default=6,
        ge=0,
        le=30,
        description="Spell capacity for prepared casters",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
        storage: Storage settings.
        rules: Rules settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="AETHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Aether Character Sheet",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    rules: RulesSettings = Field(default_factory=RulesSettings)

    @model_validator(mode="after")
    def validate_debug_logging(self) -> Settings:
        """Refuse JSON logs in debug mode, where console output is expected.

        Raises:
            ConfigurationError: If debug and json_logs are both enabled.
        """
        if self.debug and self.json_logs:
            raise ConfigurationError(
                "json_logs cannot be enabled together with debug",
                config_key="json_logs",
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "RulesSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
