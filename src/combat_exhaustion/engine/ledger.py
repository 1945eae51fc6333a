"""Per-actor exhaustion bookkeeping.

The ledger owns every read and write of the module's persisted actor state
(``previousHp``, ``exhaustionTracker``, ``firstDeathFail``) and of the
host's exhaustion level. All writes are held in the guard registry and
issued as the ledger's session; a rejected write is logged and dropped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from combat_exhaustion.core.constants import (
    EXHAUSTION_PATH,
    FLAG_EXHAUSTION_TRACKER,
    FLAG_FIRST_DEATH_FAIL,
    FLAG_PREVIOUS_HP,
    HP_PATH,
    MODULE_ID,
)
from combat_exhaustion.core.exceptions import HostError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.engine.guard import GUARD_REGISTRY, GuardRegistry
from combat_exhaustion.models.actor import get_property


if TYPE_CHECKING:
    from combat_exhaustion.host.world import World
    from combat_exhaustion.models.actor import Actor
    from combat_exhaustion.models.events import Session

logger = get_logger(__name__)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


class ExhaustionLedger:
    """Guarded access to an actor's exhaustion state for one session.

    Attributes:
        world: Host the actors live in.
        session: Session the writes are issued as.
        guard: Registry held around every write.
        module_id: Flag namespace.
    """

    def __init__(
        self,
        world: World,
        session: Session,
        guard: GuardRegistry | None = None,
        *,
        module_id: str = MODULE_ID,
    ) -> None:
        self.world = world
        self.session = session
        self.guard = guard if guard is not None else GUARD_REGISTRY
        self.module_id = module_id
        self._snapshots: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Pre-update HP snapshots
    # ------------------------------------------------------------------

    def record_snapshot(
        self,
        actor: Actor,
        changes: dict[str, Any],
        options: dict[str, Any],
        user_id: str,
    ) -> None:
        """Remember the HP an actor had before a write applies."""
        old_hp = get_property(actor, HP_PATH)
        if isinstance(old_hp, int):
            self._snapshots[actor.id] = old_hp

    def snapshot(self, actor_id: str) -> int | None:
        return self._snapshots.get(actor_id)

    def forget_snapshot(self, actor_id: str) -> None:
        self._snapshots.pop(actor_id, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_flag(self, actor: Actor, key: str) -> Any:
        return actor.get_flag(self.module_id, key)

    def previous_hp(self, actor: Actor) -> int | None:
        """Previous HP by priority: persisted flag, snapshot, current value."""
        stored = self.get_flag(actor, FLAG_PREVIOUS_HP)
        if stored is not None:
            return stored
        snapshot = self._snapshots.get(actor.id)
        if snapshot is not None:
            return snapshot
        return get_property(actor, HP_PATH)

    def tracker(self, actor: Actor) -> int:
        return int(self.get_flag(actor, FLAG_EXHAUSTION_TRACKER) or 0)

    def first_death_fail(self, actor: Actor) -> bool:
        return bool(self.get_flag(actor, FLAG_FIRST_DEATH_FAIL))

    def max_exhaustion(self) -> int:
        return self.world.config.max_exhaustion

    def is_in_combat(self, actor: Actor) -> bool:
        """Whether the actor is a combatant in any started combat."""
        return any(combat.started and combat.has_actor(actor.id) for combat in self.world.combats)

    # ------------------------------------------------------------------
    # Guarded writes
    # ------------------------------------------------------------------

    async def write(
        self,
        actor: Actor,
        changes: dict[str, Any],
        *,
        options: dict[str, Any] | None = None,
    ) -> bool:
        """Write ``changes`` while the actor is held.

        Returns:
            True if the host accepted the write, False if it was rejected or
            the actor no longer exists.
        """
        with self.guard.hold(actor.id):
            try:
                await self.world.update_actor(
                    actor.id,
                    changes,
                    user_id=self.session.user_id,
                    options=options,
                )
            except HostError as exc:
                logger.warning(
                    "Actor update failed",
                    actor=actor.name,
                    actor_id=actor.id,
                    error=exc.message,
                    details=exc.details,
                )
                return False
        return True

    async def set_flag(self, actor: Actor, key: str, value: Any) -> bool:
        return await self.write(actor, {f"flags.{self.module_id}.{key}": value})

    async def unset_flag(self, actor: Actor, key: str) -> bool:
        if self.get_flag(actor, key) is None:
            return True
        return await self.write(actor, {f"flags.{self.module_id}.-={key}": None})

    async def set_previous_hp(self, actor: Actor, hp: int) -> bool:
        return await self.set_flag(actor, FLAG_PREVIOUS_HP, hp)

    async def mark_first_death_fail(self, actor: Actor) -> bool:
        return await self.set_flag(actor, FLAG_FIRST_DEATH_FAIL, True)

    async def clear_first_death_fail(self, actor: Actor) -> bool:
        return await self.unset_flag(actor, FLAG_FIRST_DEATH_FAIL)

    async def increment_tracker(self, actor: Actor) -> int:
        """Defer one level of exhaustion to the end of combat.

        Returns:
            The tracker value after the increment.
        """
        current = self.tracker(actor)
        new_value = current + 1
        logger.debug("Queue exhaustion", actor=actor.name, tracker=current, new_tracker=new_value)
        await self.set_flag(actor, FLAG_EXHAUSTION_TRACKER, new_value)
        return self.tracker(actor)

    async def reset_tracker(self, actor: Actor) -> bool:
        return await self.set_flag(actor, FLAG_EXHAUSTION_TRACKER, 0)

    async def update_exhaustion(self, actor: Actor, amount: int) -> int | None:
        """Change the exhaustion level by ``amount``, clamped to ``[0, max]``.

        Args:
            actor: Actor to update.
            amount: Signed level delta.

        Returns:
            The level now stored on the actor, or None if the stored level
            could not be read.
        """
        raw = get_property(actor, EXHAUSTION_PATH)
        try:
            current = int(raw if raw is not None else 0)
        except (TypeError, ValueError):
            logger.warning("Exhaustion level is not an integer", actor=actor.name, value=raw)
            return None

        maximum = self.max_exhaustion()
        target = clamp(current + amount, 0, maximum)
        logger.debug(
            "Updating exhaustion",
            actor=actor.name,
            current=current,
            target=target,
            maximum=maximum,
        )
        if target != current:
            await self.write(actor, {EXHAUSTION_PATH: target})
        return actor.exhaustion_level


__all__ = [
    "clamp",
    "ExhaustionLedger",
]
