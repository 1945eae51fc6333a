"""Enumeration types for the combat exhaustion module.

These enums mirror the string values stored in world settings and host
configuration, so they compare equal to the raw setting strings.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """D&D 5E ability scores, keyed by the host's short ability ids."""

    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Constitution' for CON).
        """
        names = {
            Ability.STR: "Strength",
            Ability.DEX: "Dexterity",
            Ability.CON: "Constitution",
            Ability.INT: "Intelligence",
            Ability.WIS: "Wisdom",
            Ability.CHA: "Charisma",
        }
        return names[self]


class AccrualMode(StrEnum):
    """When accrued exhaustion becomes a real exhaustion level."""

    AFTER_COMBAT = "afterCombat"
    DURING_COMBAT = "duringCombat"
    ALWAYS = "always"


class CheckPolicy(StrEnum):
    """How a deferred tracker is resolved when combat ends."""

    DISABLED = "disabled"
    SINGLE = "singleExhaustion"
    STACKED = "stackedExhaustion"


class RuleVersion(StrEnum):
    """Exhaustion rule edition the host currently runs.

    The host only ever stores these two values.
    """

    LEGACY = "legacy"
    MODERN = "modern"


class OverrideDirection(StrEnum):
    """Which edition the overlay is simulating.

    FORCE_MODERN makes a legacy host behave like the 2024 table;
    FORCE_LEGACY makes a modern host behave like the 2014 table.
    """

    NONE = "none"
    FORCE_MODERN = "force2024"
    FORCE_LEGACY = "force2014"

    @classmethod
    def resolve(cls, swap_on: bool, rules_version: RuleVersion | str) -> OverrideDirection:
        """Derive the direction from the operator toggle and host edition.

        Args:
            swap_on: Whether the override toggle is enabled.
            rules_version: The host's current rule edition.

        Returns:
            The simulated direction, or NONE when the toggle is off.
        """
        if not swap_on:
            return cls.NONE
        if rules_version == RuleVersion.LEGACY:
            return cls.FORCE_MODERN
        if rules_version == RuleVersion.MODERN:
            return cls.FORCE_LEGACY
        return cls.NONE


class WrapperKind(StrEnum):
    """How an interceptor relates to the implementation it wraps."""

    WRAPPER = "WRAPPER"
    MIXED = "MIXED"
    OVERRIDE = "OVERRIDE"


__all__ = [
    "Ability",
    "AccrualMode",
    "CheckPolicy",
    "RuleVersion",
    "OverrideDirection",
    "WrapperKind",
]
