"""Combat Exhaustion - exhaustion tracking for D&D 5E combats.

Accrues exhaustion when characters recover from 0 HP or fail their first
death save, either immediately or deferred to the end of combat, and can
make a host running one rule edition behave like the other.

Example:
    >>> import asyncio
    >>> from combat_exhaustion import ExhaustionModule, Session, World
    >>>
    >>> world = World()
    >>> gm = ExhaustionModule(world, Session(id="gm-1", user_id="gm", is_privileged=True))
    >>> asyncio.run(gm.start())

Modules:
    core: Configuration, logging, constants, and exceptions.
    models: Pydantic V2 schemas for actors, combats, events, and rolls.
    host: Reference host world, rules engine, and interception layer.
    engine: Guard registry, ledger, saving throws, observer, and resolver.
    overlay: Rule-version overlay.
    module: Per-session lifecycle wiring.
"""

from __future__ import annotations

# Core
from combat_exhaustion.core.config import ExhaustionSettings, Settings, get_settings
from combat_exhaustion.core.exceptions import CombatExhaustionError
from combat_exhaustion.core.logging import configure_logging, get_logger

# Engine
from combat_exhaustion.engine import (
    GUARD_REGISTRY,
    ActorStateObserver,
    CombatLifecycleResolver,
    ExhaustionLedger,
    GuardRegistry,
    SavingThrowGate,
)

# Host
from combat_exhaustion.host import HostConfig, World, WrapperChain

# Models
from combat_exhaustion.models import (
    AccrualMode,
    Actor,
    CheckPolicy,
    OverrideDirection,
    RuleVersion,
    Session,
)

# Overlay
from combat_exhaustion.overlay import RuleVersionOverlay

# Lifecycle
from combat_exhaustion.module import ExhaustionModule


__version__ = "1.4.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "CombatExhaustionError",
    "Settings",
    "ExhaustionSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Actor",
    "Session",
    "AccrualMode",
    "CheckPolicy",
    "RuleVersion",
    "OverrideDirection",
    # Host
    "World",
    "HostConfig",
    "WrapperChain",
    # Engine
    "GuardRegistry",
    "GUARD_REGISTRY",
    "ExhaustionLedger",
    "SavingThrowGate",
    "ActorStateObserver",
    "CombatLifecycleResolver",
    # Overlay
    "RuleVersionOverlay",
    # Lifecycle
    "ExhaustionModule",
]
