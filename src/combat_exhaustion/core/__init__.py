"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        CombatExhaustionError: Base exception for all module errors.
        ConfigurationError: Configuration-related errors.
        HostWriteError: Persisted document write failures.

    Configuration:
        Settings: Top-level settings class.
        ExhaustionSettings: World settings for accrual and the overlay.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up module logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from combat_exhaustion.core.config import (
    ExhaustionSettings,
    Settings,
    clear_settings_cache,
    get_exhaustion_settings,
    get_settings,
)
from combat_exhaustion.core.exceptions import (
    CombatExhaustionError,
    ConfigurationError,
    DiceRollError,
    DocumentNotFoundError,
    ExhaustionError,
    GuardError,
    HostError,
    HostWriteError,
    InterceptionError,
    OverlayError,
    SavingThrowError,
)
from combat_exhaustion.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
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
    # Configuration
    "Settings",
    "ExhaustionSettings",
    "get_settings",
    "get_exhaustion_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
