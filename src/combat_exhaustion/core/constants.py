"""Module-wide constants for combat exhaustion.

This module defines the module identifier, persisted flag names, host data
paths, and the D&D 5E exhaustion rule constants used by both editions.
"""

from __future__ import annotations

# =============================================================================
# Module Identity
# =============================================================================

MODULE_ID = "combat-exhaustion"
"""Namespace for module-scoped actor flags and hook names."""

REAPPLY_HOOK = "cexhaustion-reapply"
"""Hook that re-runs the overlay's text swap and reduction shim."""

INSPECTION_MODULE_ID = "visual-active-effects"
"""Optional third-party panel whose effect descriptions get swapped."""

# =============================================================================
# Persisted Flags
# =============================================================================

FLAG_PREVIOUS_HP = "previousHp"
"""Last HP value the observer processed."""

FLAG_EXHAUSTION_TRACKER = "exhaustionTracker"
"""Deferred accrual count resolved at combat end."""

FLAG_FIRST_DEATH_FAIL = "firstDeathFail"
"""Set once per at-zero-HP episode when the first death save fails."""

# =============================================================================
# Host Data Paths
# =============================================================================

HP_PATH = "system.attributes.hp.value"
EXHAUSTION_PATH = "system.attributes.exhaustion"
DEATH_FAILURE_PATH = "system.attributes.death.failure"

# =============================================================================
# Exhaustion Rules
# =============================================================================

EXHAUSTION_CONDITION = "exhaustion"
"""Condition identity shared by both rule editions."""

DEFAULT_MAX_EXHAUSTION = 6
"""Maximum exhaustion level when the host does not configure one."""

DEFAULT_ROLL_REDUCTION = 2
"""Modern d20 penalty per exhaustion level."""

DEFAULT_SPEED_REDUCTION = 5
"""Modern speed penalty in feet per exhaustion level."""

FLAT_ROLL_PENALTY_PER_LEVEL = 2
"""Penalty the overlay injects per level when simulating the modern table."""

FLAT_SPEED_PENALTY_PER_LEVEL = 5
"""Feet removed per level when simulating the modern table."""

ROLL_PENALTY_TERM = "@exhaustion"
"""Formula term the host substitutes with the roll penalty."""

DEFAULT_SAVE_DC = 10
"""Fallback DC when a saving throw is requested without one."""

# =============================================================================
# Descriptive Text
# =============================================================================

NAME_KEY_MODERN = f"{MODULE_ID}.ui.exhaustion2024"
NAME_KEY_LEGACY = f"{MODULE_ID}.ui.exhaustion2014"
DEFAULT_CONDITION_NAME = "DND5E.ConExhaustion"

REFERENCE_MODERN = (
    "Compendium.dnd5e.content24.JournalEntry.phbAppendixCRule"
    ".JournalEntryPage.jSQtPgNm0i4f3Qi3"
)
REFERENCE_LEGACY = (
    "Compendium.dnd5e.rules.JournalEntry.w7eitkpD7QQTB6j0"
    ".JournalEntryPage.cspWveykstnu3Zcv"
)


__all__ = [
    "MODULE_ID",
    "REAPPLY_HOOK",
    "INSPECTION_MODULE_ID",
    "FLAG_PREVIOUS_HP",
    "FLAG_EXHAUSTION_TRACKER",
    "FLAG_FIRST_DEATH_FAIL",
    "HP_PATH",
    "EXHAUSTION_PATH",
    "DEATH_FAILURE_PATH",
    "EXHAUSTION_CONDITION",
    "DEFAULT_MAX_EXHAUSTION",
    "DEFAULT_ROLL_REDUCTION",
    "DEFAULT_SPEED_REDUCTION",
    "FLAT_ROLL_PENALTY_PER_LEVEL",
    "FLAT_SPEED_PENALTY_PER_LEVEL",
    "ROLL_PENALTY_TERM",
    "DEFAULT_SAVE_DC",
    "NAME_KEY_MODERN",
    "NAME_KEY_LEGACY",
    "DEFAULT_CONDITION_NAME",
    "REFERENCE_MODERN",
    "REFERENCE_LEGACY",
]
