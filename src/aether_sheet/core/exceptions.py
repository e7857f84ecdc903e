"""Custom exception hierarchy for the Aether character engine.

All exceptions inherit from AetherError, so callers at the application
boundary can catch one type while still receiving domain-specific context
in the ``details`` mapping.

Example:
    >>> from aether_sheet.core.exceptions import CatalogError
    >>> raise CatalogError("Unknown class", kind="class", record_id="artificer")
"""

from __future__ import annotations

from typing import Any


class AetherError(Exception):
    """Base exception for all Aether errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Reference Data Exceptions
# =============================================================================


class CatalogError(AetherError):
    """Raised when reference data cannot be loaded or is malformed.

    Lookup misses during derivation are not errors; they degrade to
    neutral values and are reported as data-integrity warnings.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        record_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize catalog error with record context.

        Args:
            message: Human-readable error description.
            kind: The catalog kind involved (species, class, ...).
            record_id: The record identifier involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if kind:
            combined_details["kind"] = kind
        if record_id:
            combined_details["record_id"] = record_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(AetherError):
    """Base exception for character progression and rules errors."""


class InvalidGameStateError(GameEngineError):
    """Raised when a transition is attempted from a state that forbids it.

    Typically a level-up commit while a subclass choice is outstanding,
    or a rest applied after it was cancelled.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when a dice expression is invalid or cannot be rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(AetherError):
    """Raised when a character snapshot cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        character_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if character_id:
            combined_details["character_id"] = character_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration and Validation Exceptions
# =============================================================================


class ConfigurationError(AetherError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(AetherError):
    """Raised when user selections or character data fail validation.

    Used for incomplete creation drafts and out-of-range selections such
    as spending more hit dice than are available.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    "AetherError",
    # Reference data
    "CatalogError",
    # Game engine
    "GameEngineError",
    "InvalidGameStateError",
    "DiceRollError",
    # Storage
    "StorageError",
    # Configuration and validation
    "ConfigurationError",
    "ValidationError",
]
