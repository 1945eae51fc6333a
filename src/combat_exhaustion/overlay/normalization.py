"""Post-load normalization of actors already carrying exhaustion.

Runs once at startup in the privileged session, after the overlay is
installed, so actors loaded before the interceptors existed pick up the
simulated edition's penalties immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from combat_exhaustion.core.constants import EXHAUSTION_PATH
from combat_exhaustion.core.exceptions import HostError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.overlay.state import exhaustion_level


if TYPE_CHECKING:
    from combat_exhaustion.engine.ledger import ExhaustionLedger
    from combat_exhaustion.overlay.shim import ReductionShim
    from combat_exhaustion.overlay.state import OverlayState

logger = get_logger(__name__)


class OverlayNormalizer:
    """Rewrites exhaustion state so the active direction takes effect.

    Attributes:
        ledger: Guarded writer for the session running normalization.
        state: Current overlay direction.
        shim: Reduction shim applied for force2014.
    """

    def __init__(self, ledger: ExhaustionLedger, state: OverlayState, shim: ReductionShim) -> None:
        self.ledger = ledger
        self.state = state
        self.shim = shim

    async def run(self) -> int:
        """Normalize every actor in the world.

        Returns:
            Number of actors whose exhaustion level was rewritten.
        """
        if not self.ledger.session.is_privileged:
            return 0

        rewritten = 0
        if self.state.force_modern():
            await self._strip_effect_changes()
            rewritten = await self._rewrite_levels({"diff": False})
            for actor in self.ledger.world.actors:
                self.ledger.world.render(actor)
        elif self.state.force_legacy():
            self.shim.apply()
            # No render pass: the write already re-derived movement.
            rewritten = await self._rewrite_levels({"diff": False, "render": False})

        logger.info(
            "Overlay normalization complete",
            direction=self.state.direction(),
            rewritten=rewritten,
        )
        return rewritten

    async def _strip_effect_changes(self) -> None:
        world = self.ledger.world
        for actor in world.actors:
            for effect in actor.effects:
                if not effect.is_exhaustion or not effect.changes:
                    continue
                with self.ledger.guard.hold(actor.id):
                    try:
                        await world.update_effect(
                            actor.id,
                            effect.id,
                            {"changes": []},
                            user_id=self.ledger.session.user_id,
                        )
                    except HostError as exc:
                        logger.warning(
                            "Could not clear exhaustion effect changes",
                            actor=actor.name,
                            effect=effect.name,
                            error=str(exc),
                        )

    async def _rewrite_levels(self, options: dict[str, bool]) -> int:
        count = 0
        for actor in self.ledger.world.actors:
            level = exhaustion_level(actor)
            if not level:
                continue
            if await self.ledger.write(actor, {EXHAUSTION_PATH: level}, options=dict(options)):
                count += 1
        return count


__all__ = [
    "OverlayNormalizer",
]
