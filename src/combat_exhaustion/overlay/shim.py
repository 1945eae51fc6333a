"""Scoped overrides of host-global exhaustion configuration.

``ReductionShim`` zeroes the flat roll/speed reduction constants while a
modern host simulates the 2014 table, so code paths the overlay does not
intercept also see zero. The original constants are captured into a
restore record before the first mutation and written back exactly once.

``ConditionTextSwap`` and ``EffectDescriptionOverride`` make the condition's
display name, reference, and effect descriptions match the simulated
edition.

Restore records live in the rules engine's ``config_shims`` slot rather
than on these objects: every connected session builds its own overlay, but
they all mutate the same host configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from combat_exhaustion.core.constants import (
    DEFAULT_CONDITION_NAME,
    MODULE_ID,
    NAME_KEY_LEGACY,
    NAME_KEY_MODERN,
    REFERENCE_LEGACY,
    REFERENCE_MODERN,
)
from combat_exhaustion.core.exceptions import HostError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.host.config import Reduction
from combat_exhaustion.models.enums import OverrideDirection


if TYPE_CHECKING:
    from combat_exhaustion.host.rules import HostRulesEngine
    from combat_exhaustion.host.world import World
    from combat_exhaustion.models.actor import ActiveEffect
    from combat_exhaustion.overlay.state import OverlayState

logger = get_logger(__name__)


class ConditionText(NamedTuple):
    """Display name and reference captured before the first swap."""

    name: str
    reference: str | None


class ReductionShim:
    """Zeroes ``condition_types.exhaustion.reduction`` for force2014."""

    def __init__(self, rules: HostRulesEngine, *, owner: str = MODULE_ID) -> None:
        self.rules = rules
        self.slot = f"{owner}.reduction"

    @property
    def restore_record(self) -> Reduction | None:
        return self.rules.config_shims.get(self.slot)

    @property
    def is_active(self) -> bool:
        return self.restore_record is not None

    def apply(self) -> bool:
        """Capture the current constants and zero them.

        Returns:
            True if the shim was applied now, False if already active or
            the host has no exhaustion condition.
        """
        condition = self.rules.config.exhaustion
        if condition is None or self.is_active:
            return False
        original = condition.reduction or Reduction()
        self.rules.config_shims[self.slot] = original.model_copy()
        condition.reduction = Reduction(rolls=0, speed=0)
        logger.info(
            "Exhaustion reduction shim applied",
            rolls=original.rolls,
            speed=original.speed,
        )
        return True

    def restore(self) -> bool:
        """Write the captured constants back.

        Returns:
            True if values were restored, False if the shim was not active.
        """
        condition = self.rules.config.exhaustion
        record = self.restore_record
        if condition is None or record is None:
            return False
        condition.reduction = record.model_copy()
        del self.rules.config_shims[self.slot]
        logger.info("Exhaustion reduction shim restored", rolls=record.rolls, speed=record.speed)
        return True

    def sync(self, direction: OverrideDirection) -> None:
        if direction == OverrideDirection.FORCE_LEGACY:
            self.apply()
        else:
            self.restore()


class ConditionTextSwap:
    """Swaps the exhaustion condition's display name and reference."""

    def __init__(self, world: World, *, owner: str = MODULE_ID) -> None:
        self.world = world
        self.slot = f"{owner}.condition-text"

    @property
    def original(self) -> ConditionText | None:
        return self.world.rules.config_shims.get(self.slot)

    def apply(self, direction: OverrideDirection) -> None:
        condition = self.world.config.exhaustion
        if condition is None:
            return

        original = self.original
        if original is None:
            original = ConditionText(
                name=condition.name or DEFAULT_CONDITION_NAME,
                reference=condition.reference,
            )
            self.world.rules.config_shims[self.slot] = original

        if direction == OverrideDirection.FORCE_MODERN:
            condition.name = self.world.localize(NAME_KEY_MODERN)
            condition.reference = REFERENCE_MODERN
        elif direction == OverrideDirection.FORCE_LEGACY:
            condition.name = self.world.localize(NAME_KEY_LEGACY)
            condition.reference = REFERENCE_LEGACY
        else:
            condition.name = original.name
            condition.reference = original.reference
        condition.description = None

        try:
            self.world.rules.rebuild_condition_effects()
        except HostError as exc:
            logger.debug("Condition effect rebuild failed", error=str(exc))


class EffectDescriptionOverride:
    """Read-time description for exhaustion effects in inspection panels.

    Reads return an embed of the simulated edition's rules reference;
    writes go straight to the stored description.
    """

    def __init__(self, state: OverlayState) -> None:
        self.state = state

    def read(self, effect: ActiveEffect) -> str:
        stored = effect.description
        if not self.state.swap_on() or not effect.is_exhaustion:
            return stored
        if self.state.force_modern():
            reference: str | None = REFERENCE_MODERN
        elif self.state.force_legacy():
            reference = REFERENCE_LEGACY
        else:
            reference = None
        return f"@Embed[{reference} inline]" if reference else stored

    def write(self, effect: ActiveEffect, value: str) -> None:
        effect.description = value


__all__ = [
    "ConditionText",
    "ReductionShim",
    "ConditionTextSwap",
    "EffectDescriptionOverride",
]
