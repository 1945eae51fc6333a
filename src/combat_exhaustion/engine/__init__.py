"""Exhaustion engine: guard registry, ledger, saves, observer, resolver.

Submodules:
    guard: Suppression registry for the module's own writes
    ledger: Guarded reads and writes of per-actor exhaustion state
    dice: d20-backed dice rolling
    saving_throw: Constitution save gate
    observer: Actor update handling (recovery / first death save failure)
    resolver: End-of-combat tracker resolution
"""

from __future__ import annotations

from combat_exhaustion.engine.dice import DiceRoller, RollMode, SaveRoll, save_formula
from combat_exhaustion.engine.guard import GUARD_REGISTRY, GuardRegistry
from combat_exhaustion.engine.ledger import ExhaustionLedger, clamp
from combat_exhaustion.engine.observer import ActorStateObserver, SettingsProvider
from combat_exhaustion.engine.resolver import CombatLifecycleResolver
from combat_exhaustion.engine.saving_throw import (
    DiceSavingThrowPrompt,
    SavingThrowGate,
    SavingThrowPrompt,
)


__all__ = [
    # Dice
    "DiceRoller",
    "RollMode",
    "SaveRoll",
    "save_formula",
    # Guard
    "GuardRegistry",
    "GUARD_REGISTRY",
    # Ledger
    "ExhaustionLedger",
    "clamp",
    # Saving throws
    "SavingThrowPrompt",
    "DiceSavingThrowPrompt",
    "SavingThrowGate",
    # Handlers
    "SettingsProvider",
    "ActorStateObserver",
    "CombatLifecycleResolver",
]
