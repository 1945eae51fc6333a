"""Combat lifecycle resolver: turns deferred trackers into exhaustion.

Runs once per concluded combat, in the privileged session only, and only in
afterCombat mode. Each combatant's tracker is reset to 0 whatever happens
next, then resolved by the end-of-combat check policy:

| Policy            | Save DC          | On failure      | On success |
|-------------------|------------------|-----------------|------------|
| disabled          | none             | tracker levels  | -          |
| singleExhaustion  | base + tracker   | 1 level         | 0          |
| stackedExhaustion | base + tracker   | tracker levels  | 0          |
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from combat_exhaustion.core.config import get_exhaustion_settings
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.engine.observer import SettingsProvider
from combat_exhaustion.models.enums import AccrualMode, CheckPolicy


if TYPE_CHECKING:
    from combat_exhaustion.engine.ledger import ExhaustionLedger
    from combat_exhaustion.engine.saving_throw import SavingThrowGate
    from combat_exhaustion.models.actor import Actor
    from combat_exhaustion.models.events import CombatConcluded

logger = get_logger(__name__)

# Concluded combat ids remembered for dropping duplicate events.
RESOLVED_HISTORY = 32


class CombatLifecycleResolver:
    """Handles ``delete_combat`` events for one session."""

    def __init__(
        self,
        ledger: ExhaustionLedger,
        gate: SavingThrowGate,
        *,
        settings_provider: SettingsProvider = get_exhaustion_settings,
    ) -> None:
        self.ledger = ledger
        self.gate = gate
        self._settings = settings_provider
        self._resolved: deque[str] = deque(maxlen=RESOLVED_HISTORY)

    @property
    def resolved(self) -> list[str]:
        """Ids of the most recently resolved combats, oldest first."""
        return list(self._resolved)

    async def on_combat_concluded(self, event: CombatConcluded) -> None:
        """Resolve every combatant's tracker.

        Args:
            event: The conclusion as delivered to this session.
        """
        if not event.session.is_privileged:
            return

        combat = event.combat
        if combat.id in self._resolved:
            logger.debug("Combat already resolved", combat_id=combat.id)
            return
        self._resolved.append(combat.id)

        settings = self._settings()
        if settings.exhaustion_mode != AccrualMode.AFTER_COMBAT:
            return
        policy = CheckPolicy(settings.after_combat_check_mode)

        seen: set[str] = set()
        for combatant in combat.combatants:
            actor = self.ledger.world.find_actor(combatant.actor_id)
            if actor is None or actor.id in seen:
                continue
            seen.add(actor.id)
            await self._resolve_actor(actor, policy, settings.base_save_dc)

    async def _resolve_actor(self, actor: Actor, policy: CheckPolicy, base_dc: int) -> None:
        tracker = self.ledger.tracker(actor)
        await self.ledger.reset_tracker(actor)
        if tracker <= 0:
            return

        dc = base_dc + tracker
        logger.debug(
            "End of combat",
            actor=actor.name,
            tracker=tracker,
            dc=dc,
            policy=policy,
        )

        if policy == CheckPolicy.DISABLED:
            levels = tracker
        else:
            # The save runs unguarded; only the level write below is held.
            success = await self.gate.request(actor, dc)
            if success:
                logger.info("End-of-combat save passed", actor=actor.name, dc=dc)
                return
            levels = 1 if policy == CheckPolicy.SINGLE else tracker

        logger.info("Applying combat exhaustion", actor=actor.name, levels=levels, policy=policy)
        await self.ledger.update_exhaustion(actor, levels)


__all__ = [
    "RESOLVED_HISTORY",
    "CombatLifecycleResolver",
]
