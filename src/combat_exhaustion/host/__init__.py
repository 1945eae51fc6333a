"""Reference host the module runs against.

Submodules:
    config: Global rules configuration (rule edition, condition tables)
    wrapping: Interception registry and the external wrapping facility
    rules: Rules engine with the three interceptable computations
    world: Document store, sessions, and hook bus
"""

from __future__ import annotations

from combat_exhaustion.host.config import ConditionType, HostConfig, Reduction
from combat_exhaustion.host.rules import HostRulesEngine, threshold_of
from combat_exhaustion.host.world import DescriptionAccessor, HookBus, World
from combat_exhaustion.host.wrapping import (
    WRAPPER_FACILITY_ID,
    InterceptionRegistry,
    Interceptor,
    WrapperChain,
    WrapperFacility,
)


__all__ = [
    "HostConfig",
    "ConditionType",
    "Reduction",
    "HostRulesEngine",
    "threshold_of",
    "World",
    "HookBus",
    "DescriptionAccessor",
    "InterceptionRegistry",
    "Interceptor",
    "WrapperChain",
    "WrapperFacility",
    "WRAPPER_FACILITY_ID",
]
