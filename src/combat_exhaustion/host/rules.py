"""Reference host rules engine.

Implements the three derived computations the overlay intercepts, for both
rule editions:

* ``has_condition_effect``: the legacy edition synthesizes effects from
  ``exhaustion-N`` threshold keys; the modern edition only honors explicit
  statuses.
* ``add_roll_exhaustion``: the modern edition adds ``@exhaustion`` worth
  ``-(reduction.rolls x level)``; the legacy edition adds nothing.
* ``prepare_derived_data``: derives movement. The modern edition subtracts
  ``reduction.speed x level``; both editions halve or zero movement through
  ``has_condition_effect``.

Every public computation dispatches through the ``InterceptionRegistry``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from combat_exhaustion.core.constants import EXHAUSTION_CONDITION, ROLL_PENALTY_TERM
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.host.wrapping import InterceptionRegistry
from combat_exhaustion.models.enums import RuleVersion
from combat_exhaustion.models.rolls import RollInvocation


if TYPE_CHECKING:
    from combat_exhaustion.host.config import HostConfig
    from combat_exhaustion.models.actor import Actor

logger = get_logger(__name__)


def threshold_of(status_key: str) -> int | None:
    """Exhaustion threshold encoded in a condition-effect key.

    Args:
        status_key: A key such as ``exhaustion-3`` or ``poisoned``.

    Returns:
        The integer suffix after the last ``-``, or None.
    """
    suffix = status_key.rsplit("-", 1)[-1]
    try:
        return int(suffix)
    except ValueError:
        return None


class HostRulesEngine:
    """Rules engine computing actor-derived state.

    Attributes:
        config: Global rules configuration.
        interceptions: Interception layer the computations dispatch through.
        supports_roll_exhaustion: False for hosts too old to expose the
            roll-penalty computation; rolls then go through ``pre_roll``.
        config_shims: Restore records for global config values a module
            has overridden, keyed by ``"<owner>.<slot>"``. Shared by every
            session so the first capture is the only capture.
    """

    def __init__(
        self,
        config: HostConfig,
        interceptions: InterceptionRegistry | None = None,
        *,
        supports_roll_exhaustion: bool = True,
    ) -> None:
        self.config = config
        self.interceptions = interceptions or InterceptionRegistry()
        self.supports_roll_exhaustion = supports_roll_exhaustion
        self.rebuild_count = 0
        self.config_shims: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Interceptable computations
    # ------------------------------------------------------------------

    def has_condition_effect(self, actor: Actor, key: str) -> bool:
        return self.interceptions.invoke(
            "has_condition_effect", self._has_condition_effect, actor, key
        )

    def add_roll_exhaustion(self, actor: Actor, invocation: RollInvocation) -> None:
        return self.interceptions.invoke(
            "add_roll_exhaustion", self._add_roll_exhaustion, actor, invocation
        )

    def prepare_derived_data(self, actor: Actor) -> None:
        return self.interceptions.invoke(
            "prepare_derived_data", self._prepare_derived_data, actor
        )

    # ------------------------------------------------------------------
    # Unmodified host behavior
    # ------------------------------------------------------------------

    def _has_condition_effect(self, actor: Actor, key: str) -> bool:
        props = self.config.condition_effects.get(key)
        if not props:
            return False
        level = actor.system.attributes.exhaustion
        imms = actor.system.traits.ci
        apply_exhaustion = (
            level is not None
            and EXHAUSTION_CONDITION not in imms
            and self.config.rules_version == RuleVersion.LEGACY
        )
        for prop in props:
            if prop in actor.statuses and prop not in imms:
                return True
            threshold = threshold_of(prop)
            if apply_exhaustion and threshold is not None and level >= threshold:
                return True
        return False

    def _add_roll_exhaustion(self, actor: Actor, invocation: RollInvocation) -> None:
        if self.config.rules_version != RuleVersion.MODERN:
            return
        level = actor.exhaustion_level
        condition = self.config.exhaustion
        reduction = condition.reduction.rolls if condition and condition.reduction else 0
        if not level or not reduction:
            return
        invocation.parts.append(ROLL_PENALTY_TERM)
        invocation.data["exhaustion"] = -(level * reduction)

    def _prepare_derived_data(self, actor: Actor) -> None:
        level = actor.exhaustion_level
        condition = self.config.exhaustion
        reduction = 0
        if self.config.rules_version == RuleVersion.MODERN and condition and condition.reduction:
            reduction = level * condition.reduction.speed

        multiplier = 1.0
        if self.has_condition_effect(actor, "noMovement"):
            multiplier = 0.0
        elif self.has_condition_effect(actor, "halfMovement"):
            multiplier = 0.5

        movement: dict[str, float] = {}
        for channel in self.config.movement_types:
            base = float(actor.base_movement.get(channel, 0) or 0)
            movement[channel] = max(0.0, base * multiplier - reduction) if base > 0 else 0.0
        actor.system.attributes.movement = movement

    # ------------------------------------------------------------------
    # Roll construction and bookkeeping
    # ------------------------------------------------------------------

    def build_rolls(
        self,
        actor: Actor,
        parts: list[str],
        data: dict[str, Any] | None = None,
        *,
        count: int = 1,
    ) -> list[RollInvocation]:
        """Construct the rolls for one user action.

        Advantage and disadvantage produce ``count > 1`` rolls, each with
        its own copy of the substitution data.

        Args:
            actor: Rolling actor.
            parts: Base formula parts.
            data: Base substitution data.
            count: Number of concrete rolls.

        Returns:
            The constructed invocations.
        """
        rolls = [
            RollInvocation(parts=list(parts), data=dict(data or {})) for _ in range(count)
        ]
        if self.supports_roll_exhaustion:
            for invocation in rolls:
                self.add_roll_exhaustion(actor, invocation)
        return rolls

    def rebuild_condition_effects(self) -> None:
        """Recompute cached condition-effect tables after config changes."""
        self.rebuild_count += 1
        logger.debug("Condition effects rebuilt", count=self.rebuild_count)


__all__ = [
    "threshold_of",
    "HostRulesEngine",
]
