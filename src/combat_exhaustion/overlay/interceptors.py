"""Interceptors for the three host computations the overlay reshapes.

Each interceptor is called as ``interceptor(wrapped, *args)`` where
``wrapped`` runs the previously installed implementation.

Condition-effect lookup (MIXED):
    force2024 on a legacy host answers from explicit statuses only;
    force2014 on a modern host adds threshold synthesis from
    ``exhaustion-N`` keys unless the actor is immune to exhaustion.

Roll penalty (WRAPPER):
    force2014 strips the ``@exhaustion`` term the modern host added;
    force2024 injects ``-(2 x level)`` on a legacy host. Each
    ``RollInvocation`` is adjusted at most once.

Derived movement (WRAPPER):
    force2024 subtracts ``5 x level`` feet from every positive channel
    after the host's own recompute, skipping nested recomputes of the same
    actor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from combat_exhaustion.core.constants import (
    EXHAUSTION_CONDITION,
    FLAT_ROLL_PENALTY_PER_LEVEL,
    FLAT_SPEED_PENALTY_PER_LEVEL,
    ROLL_PENALTY_TERM,
)
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.engine.guard import GuardRegistry
from combat_exhaustion.host.rules import threshold_of
from combat_exhaustion.overlay.state import exhaustion_level


if TYPE_CHECKING:
    from combat_exhaustion.models.actor import Actor
    from combat_exhaustion.models.rolls import RollConfig, RollInvocation
    from combat_exhaustion.overlay.state import OverlayState

logger = get_logger(__name__)


class ConditionEffectInterceptor:
    """Intercepts ``has_condition_effect(actor, key)``."""

    def __init__(self, state: OverlayState) -> None:
        self.state = state

    def __call__(self, wrapped: Callable[..., bool], actor: Actor, key: str) -> bool:
        props = self.state.config.condition_effects.get(key)
        if not props:
            return wrapped(actor, key)

        # Only keys with exhaustion-level entries differ between editions.
        if not any(threshold_of(prop) is not None for prop in props):
            return wrapped(actor, key)

        if not self.state.swap_on():
            return wrapped(actor, key)

        imms = actor.system.traits.ci
        has_explicit = any(prop in actor.statuses and prop not in imms for prop in props)

        if self.state.force_modern():
            return has_explicit

        if self.state.force_legacy():
            if EXHAUSTION_CONDITION in imms:
                return has_explicit
            level = actor.system.attributes.exhaustion
            thresholds = [threshold_of(prop) for prop in props]
            synthesized = level is not None and any(
                threshold is not None and level >= threshold for threshold in thresholds
            )
            return has_explicit or synthesized

        return wrapped(actor, key)


def strip_roll_penalty(invocation: RollInvocation) -> None:
    """Remove every ``@exhaustion`` term and zero its substitution value."""
    invocation.parts[:] = [part for part in invocation.parts if part != ROLL_PENALTY_TERM]
    value = invocation.data.get("exhaustion")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        invocation.data["exhaustion"] = 0


class RollPenaltyInterceptor:
    """Intercepts ``add_roll_exhaustion(actor, invocation)``."""

    def __init__(self, state: OverlayState) -> None:
        self.state = state

    def __call__(
        self,
        wrapped: Callable[..., Any],
        actor: Actor,
        invocation: RollInvocation,
    ) -> Any:
        result = wrapped(actor, invocation)
        if not self.state.swap_on():
            return result

        level = exhaustion_level(actor)
        if not level:
            return result
        if invocation.exhaustion_applied:
            return result
        invocation.exhaustion_applied = True

        if self.state.force_legacy():
            strip_roll_penalty(invocation)
            return result

        if self.state.force_modern():
            strip_roll_penalty(invocation)
            invocation.parts.append(ROLL_PENALTY_TERM)
            invocation.data["exhaustion"] = -(FLAT_ROLL_PENALTY_PER_LEVEL * level)
            logger.debug(
                "Injected flat roll penalty",
                actor=actor.name,
                penalty=invocation.data["exhaustion"],
            )

        return result


class PreRollFallback:
    """``pre_roll`` handler for hosts without a roll-penalty computation."""

    def __init__(self, state: OverlayState) -> None:
        self.state = state

    def __call__(self, actor: Actor, roll_config: RollConfig) -> None:
        if not self.state.force_modern():
            return
        level = exhaustion_level(actor)
        if level <= 0:
            return
        if roll_config.exhaustion_applied:
            return
        roll_config.exhaustion_applied = True

        penalty = -(FLAT_ROLL_PENALTY_PER_LEVEL * level)
        roll_config.parts.append(penalty)
        roll_config.flavor = " • ".join(
            part for part in (roll_config.flavor, f"Exhausted (2024): {penalty}") if part
        )
        if isinstance(roll_config.disadvantage, bool):
            roll_config.disadvantage = False


class MovementInterceptor:
    """Intercepts ``prepare_derived_data(actor)``."""

    def __init__(self, state: OverlayState) -> None:
        self.state = state
        self.in_progress = GuardRegistry("prepare-derived-data")

    def __call__(self, wrapped: Callable[..., Any], actor: Actor) -> Any:
        if self.in_progress.is_guarded(actor.id):
            return wrapped(actor)

        with self.in_progress.hold(actor.id):
            result = wrapped(actor)
            if not self.state.force_modern():
                return result

            level = exhaustion_level(actor)
            if not level:
                return result

            movement = actor.system.attributes.movement
            reduction = FLAT_SPEED_PENALTY_PER_LEVEL * level
            adjusted = dict(movement)
            for channel in self.state.config.movement_types:
                current = movement.get(channel, 0)
                if current > 0:
                    adjusted[channel] = max(0.0, current - reduction)
            actor.system.attributes.movement = adjusted
            return result


__all__ = [
    "ConditionEffectInterceptor",
    "RollPenaltyInterceptor",
    "PreRollFallback",
    "MovementInterceptor",
    "strip_roll_penalty",
]
