"""One session's copy of the combat exhaustion module.

``ExhaustionModule`` wires the engine and the overlay to a host world for a
single connected session, following the host's lifecycle:

* ``init`` subscribes the handlers to the session's hook bus.
* ``setup`` installs the rule-version overlay.
* ``ready`` seeds ``previousHp`` and runs overlay normalization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from combat_exhaustion.core.config import get_exhaustion_settings, get_settings
from combat_exhaustion.core.constants import FLAG_PREVIOUS_HP, HP_PATH, REAPPLY_HOOK
from combat_exhaustion.core.exceptions import DocumentNotFoundError
from combat_exhaustion.core.logging import bind_context, get_logger
from combat_exhaustion.engine.guard import GUARD_REGISTRY, GuardRegistry
from combat_exhaustion.engine.ledger import ExhaustionLedger
from combat_exhaustion.engine.observer import ActorStateObserver
from combat_exhaustion.engine.resolver import CombatLifecycleResolver
from combat_exhaustion.engine.saving_throw import SavingThrowGate
from combat_exhaustion.models.actor import get_property
from combat_exhaustion.overlay.manager import RuleVersionOverlay


if TYPE_CHECKING:
    from combat_exhaustion.engine.observer import SettingsProvider
    from combat_exhaustion.engine.saving_throw import SavingThrowPrompt
    from combat_exhaustion.host.world import World
    from combat_exhaustion.models.events import Session

logger = get_logger(__name__)


class ExhaustionModule:
    """Exhaustion tracking and rule-version overlay for one session.

    Attributes:
        world: Host world.
        session: Session this copy runs in.
        module_id: Flag namespace on actor documents and owner of overlay patches.
        hooks: The session's hook bus.
        ledger: Guarded exhaustion state access.
        gate: Constitution save gate.
        observer: ``update_actor`` handler.
        resolver: ``delete_combat`` handler.
        overlay: Rule-version overlay.
    """

    def __init__(
        self,
        world: World,
        session: Session,
        *,
        settings_provider: SettingsProvider = get_exhaustion_settings,
        prompt: SavingThrowPrompt | None = None,
        guard: GuardRegistry | None = None,
        module_id: str | None = None,
    ) -> None:
        self.world = world
        self.session = session
        self.module_id = module_id or get_settings().module_id
        try:
            self.hooks = world.hooks_for(session)
        except DocumentNotFoundError:
            self.hooks = world.connect(session)

        self.ledger = ExhaustionLedger(
            world,
            session,
            guard if guard is not None else GUARD_REGISTRY,
            module_id=self.module_id,
        )
        self.gate = SavingThrowGate(prompt)
        self.observer = ActorStateObserver(
            self.ledger, self.gate, settings_provider=settings_provider
        )
        self.resolver = CombatLifecycleResolver(
            self.ledger, self.gate, settings_provider=settings_provider
        )
        self.overlay = RuleVersionOverlay(
            self.ledger, self.hooks, settings_provider=settings_provider, owner=self.module_id
        )
        self._initialized = False

    def init(self) -> None:
        """Subscribe to host events. Safe to call more than once."""
        if self._initialized:
            return
        bind_context(
            session_id=self.session.id,
            user_id=self.session.user_id,
            module_id=self.module_id,
        )
        self.hooks.on("pre_update_actor", self.ledger.record_snapshot)
        self.hooks.on("update_actor", self.observer.on_actor_mutated)
        self.hooks.on("delete_combat", self.resolver.on_combat_concluded)
        self.hooks.on(REAPPLY_HOOK, self.overlay.refresh)
        self._initialized = True
        logger.info(
            "Combat exhaustion initialized",
            session_id=self.session.id,
            privileged=self.session.is_privileged,
        )

    def setup(self) -> None:
        self.overlay.setup()

    async def ready(self) -> None:
        """Seed ``previousHp`` and normalize actors for the overlay."""
        await self._seed_previous_hp()
        await self.overlay.ready()

    async def start(self) -> None:
        """Run ``init``, ``setup`` and ``ready`` in order."""
        self.init()
        self.setup()
        await self.ready()

    async def on_settings_changed(self) -> None:
        """Re-sync the overlay after a settings change."""
        self.overlay.refresh()
        await self.overlay.normalizer.run()

    async def _seed_previous_hp(self) -> None:
        for actor in self.world.actors:
            if not (actor.is_owner(self.session.user_id) or self.session.is_privileged):
                continue
            if self.ledger.get_flag(actor, FLAG_PREVIOUS_HP) is None:
                current = get_property(actor, HP_PATH)
                if isinstance(current, int):
                    if await self.ledger.set_previous_hp(actor, current):
                        logger.debug("Seeded previousHp", actor=actor.name, hp=current)
            self.ledger.forget_snapshot(actor.id)


__all__ = [
    "ExhaustionModule",
]
