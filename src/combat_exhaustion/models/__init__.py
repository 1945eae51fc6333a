"""Pydantic V2 schemas for the combat exhaustion module.

Submodules:
    enums: Setting and rule enumerations (AccrualMode, RuleVersion, ...)
    actor: Host actor and active effect documents plus dotted-path helpers
    combat: Combat and combatant documents
    events: Sessions and the events the engine consumes
    rolls: Per-roll invocation context
"""

from __future__ import annotations

from combat_exhaustion.models.actor import (
    ActiveEffect,
    Actor,
    ActorSystem,
    Attributes,
    DeathSaves,
    HitPoints,
    Traits,
    get_property,
    set_property,
)
from combat_exhaustion.models.combat import Combat, Combatant
from combat_exhaustion.models.enums import (
    Ability,
    AccrualMode,
    CheckPolicy,
    OverrideDirection,
    RuleVersion,
    WrapperKind,
)
from combat_exhaustion.models.events import ActorMutated, CombatConcluded, Session
from combat_exhaustion.models.rolls import RollConfig, RollInvocation


__all__ = [
    # Enumerations
    "Ability",
    "AccrualMode",
    "CheckPolicy",
    "RuleVersion",
    "OverrideDirection",
    "WrapperKind",
    # Documents
    "Actor",
    "ActorSystem",
    "Attributes",
    "HitPoints",
    "DeathSaves",
    "Traits",
    "ActiveEffect",
    "Combat",
    "Combatant",
    "get_property",
    "set_property",
    # Events
    "Session",
    "ActorMutated",
    "CombatConcluded",
    # Rolls
    "RollInvocation",
    "RollConfig",
]
