"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        AetherError: Base exception for all application errors.
        CatalogError: Reference data loading errors.
        InvalidGameStateError: Forbidden state transitions.
        ValidationError: Data validation errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
"""

from __future__ import annotations

from aether_sheet.core.config import (
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from aether_sheet.core.exceptions import (
    AetherError,
    CatalogError,
    ConfigurationError,
    DiceRollError,
    GameEngineError,
    InvalidGameStateError,
    StorageError,
    ValidationError,
)
from aether_sheet.core.logging import (
    bind_context,
    character_context,
    clear_context,
    configure_logging,
    get_logger,
    setup_logging,
)


__all__ = [
    # Configuration
    "Settings",
    "StorageSettings",
    "RulesSettings",
    "get_settings",
    "clear_settings_cache",
    # Exceptions
    "AetherError",
    "CatalogError",
    "ConfigurationError",
    "DiceRollError",
    "GameEngineError",
    "InvalidGameStateError",
    "StorageError",
    "ValidationError",
    # Logging
    "configure_logging",
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
]
