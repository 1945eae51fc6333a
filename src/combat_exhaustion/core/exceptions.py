"""Custom exception hierarchy for the combat exhaustion module.

All exceptions inherit from CombatExhaustionError so that host adapters can
catch module failures at a single boundary while still keeping
domain-specific context in ``details``.

Example:
    >>> from combat_exhaustion.core.exceptions import HostWriteError
    >>> raise HostWriteError("Update rejected", actor_id="abc", path="flags")
"""

from __future__ import annotations

from typing import Any


class CombatExhaustionError(Exception):
    """Base exception for all combat exhaustion errors.

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
# Configuration Exceptions
# =============================================================================


class ConfigurationError(CombatExhaustionError):
    """Raised when module configuration is invalid or cannot be loaded."""

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


# =============================================================================
# Host Exceptions
# =============================================================================


class HostError(CombatExhaustionError):
    """Base exception for failures reported by the host document layer."""


class HostWriteError(HostError):
    """Raised when a persisted document write fails.

    The module treats these as transient: they are logged and the decision
    that produced the write is not retried.
    """

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize host write error with document context.

        Args:
            message: Human-readable error description.
            actor_id: Identifier of the actor whose update failed.
            path: Dotted data path that was being written.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if actor_id:
            combined_details["actor_id"] = actor_id
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


class DocumentNotFoundError(HostError):
    """Raised when a referenced actor or combat does not exist."""

    def __init__(
        self,
        message: str,
        *,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if document_id:
            combined_details["document_id"] = document_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Exhaustion Engine Exceptions
# =============================================================================


class ExhaustionError(CombatExhaustionError):
    """Base exception for exhaustion engine errors."""


class GuardError(ExhaustionError):
    """Raised when a guard entry is released without a matching acquire."""

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if actor_id:
            combined_details["actor_id"] = actor_id
        super().__init__(message, details=combined_details)


class SavingThrowError(ExhaustionError):
    """Raised when a saving throw prompt fails to produce a result."""

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        dc: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize saving throw error with roll context.

        Args:
            message: Human-readable error description.
            actor_id: Identifier of the actor making the save.
            dc: Difficulty class of the save.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if actor_id:
            combined_details["actor_id"] = actor_id
        if dc is not None:
            combined_details["dc"] = dc
        super().__init__(message, details=combined_details)


class DiceRollError(ExhaustionError):
    """Raised when dice rolling operations fail.

    This typically occurs when parsing invalid dice notation.
    """

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Overlay Exceptions
# =============================================================================


class OverlayError(CombatExhaustionError):
    """Base exception for rule-version overlay errors."""


class InterceptionError(OverlayError):
    """Raised when an interceptor cannot be registered against the host."""

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if target:
            combined_details["target"] = target
        super().__init__(message, details=combined_details)


__all__ = [
    "CombatExhaustionError",
    "ConfigurationError",
    "HostError",
    "HostWriteError",
    "DocumentNotFoundError",
    "ExhaustionError",
    "GuardError",
    "SavingThrowError",
    "DiceRollError",
    "OverlayError",
    "InterceptionError",
]
