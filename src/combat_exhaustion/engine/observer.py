"""Actor state observer: turns actor updates into exhaustion accruals.

Per actor, HP is either ``Alive`` (> 0) or ``Down`` (= 0):

* ``Down -> Alive`` is a recovery. It clears ``firstDeathFail`` and, unless
  accrual is tied to death saves, accrues one level.
* The death-save failure count rising above 0 while ``firstDeathFail`` is
  unset is a first failure. When accrual is tied to death saves, it sets
  ``firstDeathFail`` and accrues one level.

An accrual is deferred to the tracker (afterCombat mode, in combat) or
applied immediately (duringCombat mode in combat, or always mode). A
Constitution save may cancel it, depending on the settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from combat_exhaustion.core.config import ExhaustionSettings, get_exhaustion_settings
from combat_exhaustion.core.constants import DEATH_FAILURE_PATH, HP_PATH
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.models.actor import get_property
from combat_exhaustion.models.enums import AccrualMode, CheckPolicy


if TYPE_CHECKING:
    from combat_exhaustion.engine.ledger import ExhaustionLedger
    from combat_exhaustion.engine.saving_throw import SavingThrowGate
    from combat_exhaustion.models.actor import Actor
    from combat_exhaustion.models.events import ActorMutated

logger = get_logger(__name__)

SettingsProvider = Callable[[], ExhaustionSettings]


class ActorStateObserver:
    """Handles ``update_actor`` events for one session."""

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

    async def on_actor_mutated(self, event: ActorMutated) -> None:
        """React to an actor update.

        Args:
            event: The update as delivered to this session.
        """
        actor = event.actor
        if self.ledger.guard.is_guarded(actor.id):
            return

        session = event.session
        if not (actor.is_owner(session.user_id) or session.is_privileged):
            return

        hp_changed = event.touches(HP_PATH)
        death_fail_changed = event.touches(DEATH_FAILURE_PATH)
        if not hp_changed and not death_fail_changed:
            return

        settings = self._settings()
        mode = AccrualMode(settings.exhaustion_mode)
        in_combat = self.ledger.is_in_combat(actor)
        hp_value = event.changes.get(HP_PATH, actor.hp)
        prev_hp = self.ledger.previous_hp(actor)
        privileged = session.is_privileged

        logger.debug(
            "Actor updated",
            actor=actor.name,
            hp=hp_value,
            prev=prev_hp,
            mode=mode,
            in_combat=in_combat,
            hp_changed=hp_changed,
            death_fail_changed=death_fail_changed,
            session=session.id,
        )

        # Writes only happen in the privileged session so that an actor owned
        # by several connected users is not exhausted once per session.
        # previousHp is stored before any save prompt is awaited so that an
        # update arriving meanwhile compares against the new HP.
        if hp_changed and hp_value != prev_hp and privileged:
            await self.ledger.set_previous_hp(actor, hp_value)

        if hp_changed and hp_value is not None and hp_value > 0 and prev_hp == 0 and privileged:
            await self._handle_recovery(actor, settings, mode, in_combat)

        if death_fail_changed and settings.exhaust_on_first_death_fail and privileged:
            death_fails = event.changes.get(
                DEATH_FAILURE_PATH, get_property(actor, DEATH_FAILURE_PATH)
            )
            if int(death_fails or 0) > 0 and not self.ledger.first_death_fail(actor):
                await self._handle_first_failure(actor, settings, mode, in_combat)

    async def _handle_recovery(
        self,
        actor: Actor,
        settings: ExhaustionSettings,
        mode: AccrualMode,
        in_combat: bool,
    ) -> None:
        await self.ledger.clear_first_death_fail(actor)
        if settings.exhaust_on_first_death_fail:
            return

        accrue = True
        if self._recovery_save_applies(settings, mode, in_combat):
            accrue = not await self.gate.request(actor, settings.base_save_dc)

        logger.debug("Recovered from 0 HP", actor=actor.name, accrue=accrue)
        if accrue:
            await self._accrue(actor, mode, in_combat)

    async def _handle_first_failure(
        self,
        actor: Actor,
        settings: ExhaustionSettings,
        mode: AccrualMode,
        in_combat: bool,
    ) -> None:
        logger.debug("First death save failure", actor=actor.name)
        await self.ledger.mark_first_death_fail(actor)

        accrue = True
        if mode == AccrualMode.AFTER_COMBAT and in_combat:
            if settings.enable_con_save:
                accrue = not await self.gate.request(actor, settings.base_save_dc)
        elif (mode == AccrualMode.DURING_COMBAT and in_combat) or mode == AccrualMode.ALWAYS:
            if settings.enable_con_save and in_combat:
                accrue = not await self.gate.request(actor, settings.base_save_dc)

        if accrue:
            await self._accrue(actor, mode, in_combat)

    @staticmethod
    def _recovery_save_applies(
        settings: ExhaustionSettings,
        mode: AccrualMode,
        in_combat: bool,
    ) -> bool:
        if not settings.enable_con_save:
            return False
        if settings.after_combat_check_mode != CheckPolicy.DISABLED:
            return False
        return in_combat or mode == AccrualMode.ALWAYS

    async def _accrue(self, actor: Actor, mode: AccrualMode, in_combat: bool) -> None:
        if mode == AccrualMode.AFTER_COMBAT and in_combat:
            await self.ledger.increment_tracker(actor)
        elif (mode == AccrualMode.DURING_COMBAT and in_combat) or mode == AccrualMode.ALWAYS:
            await self.ledger.update_exhaustion(actor, 1)
        else:
            logger.debug("Accrual has no effect outside combat", actor=actor.name, mode=mode)


__all__ = [
    "SettingsProvider",
    "ActorStateObserver",
]
