"""Rule-version overlay lifecycle.

``RuleVersionOverlay`` installs the interceptors on the host's rules engine
during ``setup``, keeps the reduction shim and condition text in step with
the toggle, and runs normalization on ``ready`` and after a toggle change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from combat_exhaustion.core.config import get_exhaustion_settings
from combat_exhaustion.core.constants import INSPECTION_MODULE_ID, MODULE_ID
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.models.enums import WrapperKind
from combat_exhaustion.overlay.interceptors import (
    ConditionEffectInterceptor,
    MovementInterceptor,
    PreRollFallback,
    RollPenaltyInterceptor,
)
from combat_exhaustion.overlay.normalization import OverlayNormalizer
from combat_exhaustion.overlay.shim import (
    ConditionTextSwap,
    EffectDescriptionOverride,
    ReductionShim,
)
from combat_exhaustion.overlay.state import OverlayState


if TYPE_CHECKING:
    from combat_exhaustion.engine.ledger import ExhaustionLedger
    from combat_exhaustion.engine.observer import SettingsProvider
    from combat_exhaustion.host.world import HookBus, World

logger = get_logger(__name__)


class RuleVersionOverlay:
    """One session's view of the rule-version overlay.

    The interceptors are installed on the shared rules engine; installing
    them again from another session (or a second ``setup``) is a no-op.

    Attributes:
        ledger: Guarded writer used by normalization.
        hooks: The session's hook bus.
        state: Direction computed from settings and the host edition.
        shim: Reduction-constant shim.
        text: Condition name/reference swap.
        normalizer: Startup and post-toggle normalization.
    """

    def __init__(
        self,
        ledger: ExhaustionLedger,
        hooks: HookBus,
        *,
        settings_provider: SettingsProvider = get_exhaustion_settings,
        owner: str = MODULE_ID,
    ) -> None:
        self.ledger = ledger
        self.hooks = hooks
        self.owner = owner
        world = ledger.world
        self.state = OverlayState(world.config, settings_provider)
        self.shim = ReductionShim(world.rules, owner=owner)
        self.text = ConditionTextSwap(world, owner=owner)
        self.normalizer = OverlayNormalizer(ledger, self.state, self.shim)

        self.condition_effect = ConditionEffectInterceptor(self.state)
        self.roll_penalty = RollPenaltyInterceptor(self.state)
        self.movement = MovementInterceptor(self.state)
        self.pre_roll = PreRollFallback(self.state)
        self.description = EffectDescriptionOverride(self.state)

    @property
    def world(self) -> World:
        return self.ledger.world

    def setup(self) -> int:
        """Sync global state and install the interceptors.

        Returns:
            Number of interceptors newly installed by this call.
        """
        self.refresh()

        interceptions = self.world.rules.interceptions
        installed = sum(
            (
                interceptions.register(
                    self.owner,
                    "has_condition_effect",
                    self.condition_effect,
                    WrapperKind.MIXED,
                ),
                interceptions.register(
                    self.owner,
                    "add_roll_exhaustion",
                    self.roll_penalty,
                    WrapperKind.WRAPPER,
                ),
                interceptions.register(
                    self.owner,
                    "prepare_derived_data",
                    self.movement,
                    WrapperKind.WRAPPER,
                ),
            )
        )

        if not self.world.rules.supports_roll_exhaustion:
            if self.pre_roll not in self.hooks.handlers("pre_roll"):
                self.hooks.on("pre_roll", self.pre_roll)
                logger.info("Roll penalty installed on pre_roll hook")

        if self.world.config.is_module_active(INSPECTION_MODULE_ID):
            if not isinstance(self.world.description_accessor, EffectDescriptionOverride):
                self.world.description_accessor = self.description

        logger.info(
            "Rule-version overlay set up",
            rules_version=self.state.rules_version,
            swap_on=self.state.swap_on(),
            direction=self.state.direction(),
            installed=installed,
        )
        return installed

    def refresh(self) -> None:
        """Bring the reduction shim and condition text in line with the toggle."""
        direction = self.state.direction()
        self.shim.sync(direction)
        self.text.apply(direction)
        logger.debug("Overlay refreshed", direction=direction)

    async def ready(self) -> int:
        """Apply the condition text and normalize existing actors.

        Returns:
            Number of actors whose exhaustion level was rewritten.
        """
        self.text.apply(self.state.direction())
        return await self.normalizer.run()


__all__ = [
    "RuleVersionOverlay",
]
