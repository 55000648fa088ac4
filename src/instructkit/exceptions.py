"""Custom exceptions for InstructKit."""

from typing import Any


class InstructKitError(Exception):
    """Base exception for all InstructKit errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}


class SelectionError(InstructKitError):
    """Raised when form input does not pass the validation gate."""


class ConfigError(InstructKitError):
    """Raised when generator configuration cannot be loaded."""


class TemplateLoadError(InstructKitError):
    """Raised when a fragment cannot be fetched from the store."""
