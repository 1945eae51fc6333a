"""Overlay direction, recomputed from settings and the host on every read."""

from __future__ import annotations

from typing import TYPE_CHECKING

from combat_exhaustion.core.config import get_exhaustion_settings
from combat_exhaustion.core.constants import EXHAUSTION_PATH
from combat_exhaustion.models.actor import get_property
from combat_exhaustion.models.enums import OverrideDirection, RuleVersion


if TYPE_CHECKING:
    from combat_exhaustion.engine.observer import SettingsProvider
    from combat_exhaustion.host.config import HostConfig
    from combat_exhaustion.models.actor import Actor


class OverlayState:
    """Answers "which edition are we simulating right now?".

    Nothing is cached: the toggle and the host edition are read on every
    call so a settings change takes effect immediately.
    """

    def __init__(
        self,
        config: HostConfig,
        settings_provider: SettingsProvider = get_exhaustion_settings,
    ) -> None:
        self.config = config
        self._settings = settings_provider

    def swap_on(self) -> bool:
        return self._settings().exhaustion_override_swap is True

    @property
    def rules_version(self) -> RuleVersion:
        return RuleVersion(self.config.rules_version)

    def direction(self) -> OverrideDirection:
        return OverrideDirection.resolve(self.swap_on(), self.rules_version)

    def force_modern(self) -> bool:
        """Legacy host behaving like the 2024 table."""
        return self.direction() == OverrideDirection.FORCE_MODERN

    def force_legacy(self) -> bool:
        """Modern host behaving like the 2014 table."""
        return self.direction() == OverrideDirection.FORCE_LEGACY


def exhaustion_level(actor: Actor) -> int:
    """Exhaustion level as a plain int, 0 when missing or unreadable."""
    raw = get_property(actor, EXHAUSTION_PATH)
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        return 0


__all__ = [
    "OverlayState",
    "exhaustion_level",
]
