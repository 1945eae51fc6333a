"""Rule-version overlay: make one rule edition behave like the other.

Submodules:
    state: Overlay direction from the toggle and the host edition
    interceptors: Condition-effect, roll-penalty, and movement interceptors
    shim: Reduction-constant shim, condition text swap, description override
    normalization: Startup and post-toggle actor normalization
    manager: Installation and lifecycle
"""

from __future__ import annotations

from combat_exhaustion.overlay.interceptors import (
    ConditionEffectInterceptor,
    MovementInterceptor,
    PreRollFallback,
    RollPenaltyInterceptor,
    strip_roll_penalty,
)
from combat_exhaustion.overlay.manager import RuleVersionOverlay
from combat_exhaustion.overlay.normalization import OverlayNormalizer
from combat_exhaustion.overlay.shim import (
    ConditionText,
    ConditionTextSwap,
    EffectDescriptionOverride,
    ReductionShim,
)
from combat_exhaustion.overlay.state import OverlayState, exhaustion_level


__all__ = [
    # State
    "OverlayState",
    "exhaustion_level",
    # Interceptors
    "ConditionEffectInterceptor",
    "RollPenaltyInterceptor",
    "PreRollFallback",
    "MovementInterceptor",
    "strip_roll_penalty",
    # Global config
    "ConditionText",
    "ReductionShim",
    "ConditionTextSwap",
    "EffectDescriptionOverride",
    # Lifecycle
    "OverlayNormalizer",
    "RuleVersionOverlay",
]
