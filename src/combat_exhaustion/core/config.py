"""Configuration management for the combat exhaustion module.

Settings are loaded with pydantic-settings from environment variables and
``.env`` files. The host treats them as read-only world settings; the
module consumes them through a zero-argument provider so a changed setting
is observed by the next event.

Example:
    >>> from combat_exhaustion.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.exhaustion.exhaustion_mode
    'afterCombat'

Environment Variables:
    COMBAT_EXHAUSTION_EXHAUSTION_MODE: afterCombat, duringCombat or always
    COMBAT_EXHAUSTION_ENABLE_CON_SAVE: Gate accrual behind a Constitution save
    COMBAT_EXHAUSTION_BASE_SAVE_DC: Base DC for every save the module asks for
    COMBAT_EXHAUSTION_EXHAUSTION_OVERRIDE_SWAP: Swap 2014/2024 exhaustion rules
    COMBAT_EXHAUSTION_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from combat_exhaustion.core.constants import MODULE_ID
from combat_exhaustion.core.exceptions import ConfigurationError
from combat_exhaustion.core.logging import get_logger


logger = get_logger(__name__)


class ExhaustionSettings(BaseSettings):
    """World settings that drive exhaustion accrual and the rule overlay.

    Attributes:
        exhaustion_mode: When accrued exhaustion is applied.
        exhaust_on_first_death_fail: Accrue on the first failed death save
            instead of on recovery from 0 HP.
        enable_con_save: Let a Constitution save cancel an accrual.
        base_save_dc: Base DC for every save the module requests.
        after_combat_check_mode: How the tracker is resolved at combat end.
        exhaustion_override_swap: Make the host behave like the other
            exhaustion rule edition.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMBAT_EXHAUSTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    exhaustion_mode: Literal["afterCombat", "duringCombat", "always"] = Field(
        default="afterCombat",
        description="When accrued exhaustion is applied",
    )
    exhaust_on_first_death_fail: bool = Field(
        default=False,
        description="Accrue on first death save failure instead of recovery",
    )
    enable_con_save: bool = Field(
        default=False,
        description="Allow a Constitution save to avoid exhaustion",
    )
    base_save_dc: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Base Constitution save DC",
    )
    after_combat_check_mode: Literal[
        "disabled", "singleExhaustion", "stackedExhaustion"
    ] = Field(
        default="disabled",
        description="End-of-combat check policy",
    )
    exhaustion_override_swap: bool = Field(
        default=False,
        description="Swap 2014/2024 exhaustion rules",
    )

    @model_validator(mode="after")
    def warn_on_inert_check_mode(self) -> "ExhaustionSettings":
        """Log when the end-of-combat policy cannot take effect.

        Returns:
            Self, unchanged.
        """
        if self.after_combat_check_mode != "disabled" and self.exhaustion_mode != "afterCombat":
            logger.warning(
                "End-of-combat check mode only applies in afterCombat mode",
                after_combat_check_mode=self.after_combat_check_mode,
                exhaustion_mode=self.exhaustion_mode,
            )
        return self


class Settings(BaseSettings):
    """Top-level settings aggregating the module's configuration domains.

    Attributes:
        module_id: Flag namespace used on actor documents.
        debug: Emit decision-level debug events.
        log_level: Logging level.
        json_logs: Render logs as JSON instead of console output.
        exhaustion: Exhaustion and overlay world settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMBAT_EXHAUSTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    module_id: str = Field(default=MODULE_ID, description="Flag namespace")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="JSON log output")

    exhaustion: ExhaustionSettings = Field(default_factory=ExhaustionSettings)

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the debug switch.

        Returns:
            ``DEBUG`` when debug mode is on, otherwise ``log_level``.
        """
        return "DEBUG" if self.debug else self.log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the module settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If the configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load module settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def get_exhaustion_settings() -> ExhaustionSettings:
    """Default settings provider used by the engine and overlay."""
    return get_settings().exhaustion


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "ExhaustionSettings",
    "Settings",
    "get_settings",
    "get_exhaustion_settings",
    "clear_settings_cache",
]
