"""d20-backed rolls for the default Constitution save prompt.

Only what a saving throw needs: ``1d20 + bonus``, optionally rolled with
advantage (``2d20kh1``) or disadvantage (``2d20kl1``).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import d20

from combat_exhaustion.core.exceptions import DiceRollError
from combat_exhaustion.core.logging import get_logger


logger = get_logger(__name__)


class RollMode(StrEnum):
    """How many d20s are rolled and which one is kept."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"


D20_TERMS = {
    RollMode.NORMAL: "1d20",
    RollMode.ADVANTAGE: "2d20kh1",
    RollMode.DISADVANTAGE: "2d20kl1",
}


@dataclass(frozen=True)
class SaveRoll:
    """Outcome of one rolled formula.

    Attributes:
        formula: The formula as written by the caller.
        total: Final result.
        kept: Values of the dice that counted toward the total.
        modifier: ``total`` minus the kept dice.
        mode: Advantage state the roll was made with.
    """

    formula: str
    total: int
    kept: list[int]
    modifier: int
    mode: RollMode = RollMode.NORMAL

    @property
    def natural(self) -> int | None:
        return self.kept[0] if self.kept else None

    @property
    def is_natural_20(self) -> bool:
        return self.natural == 20

    @property
    def is_natural_1(self) -> bool:
        return self.natural == 1

    def meets(self, dc: int) -> bool:
        return self.total >= dc


def save_formula(bonus: int, mode: RollMode = RollMode.NORMAL) -> str:
    """Formula for a saving throw with ``bonus``.

    >>> save_formula(-2)
    '1d20-2'
    >>> save_formula(3, RollMode.ADVANTAGE)
    '2d20kh1+3'
    """
    sign = "+" if bonus >= 0 else ""
    return f"{D20_TERMS[mode]}{sign}{bonus}"


def _kept_dice(node: Any) -> list[int]:
    if isinstance(node, d20.Dice):
        return [die.number for die in node.values if die.kept]
    kept: list[int] = []
    for child in getattr(node, "children", ()):
        kept.extend(_kept_dice(child))
    return kept


class DiceRoller:
    """Rolls formulas through d20.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> roller.roll_save(3).meets(10)  # doctest: +SKIP
        True
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the roller.

        Args:
            seed: Seed for the global random source, for reproducible rolls.
        """
        if seed is not None:
            random.seed(seed)

    def roll(self, formula: str, *, mode: RollMode = RollMode.NORMAL) -> SaveRoll:
        """Roll ``formula``.

        Args:
            formula: Dice notation such as ``1d20+5``.
            mode: Recorded on the result; the formula must already encode it.

        Returns:
            The rolled result.

        Raises:
            DiceRollError: If the formula is empty or d20 cannot parse it.
        """
        if not formula or not formula.strip():
            raise DiceRollError("Empty dice expression", expression=formula)
        try:
            result = d20.roll(formula)
        except d20.RollError as exc:
            raise DiceRollError(f"Invalid dice expression: {exc}", expression=formula) from exc

        kept = _kept_dice(result.expr)
        logger.debug("Dice rolled", formula=formula, total=result.total, kept=kept)
        return SaveRoll(
            formula=formula,
            total=result.total,
            kept=kept,
            modifier=result.total - sum(kept),
            mode=mode,
        )

    def roll_save(self, bonus: int, *, mode: RollMode = RollMode.NORMAL) -> SaveRoll:
        return self.roll(save_formula(bonus, mode), mode=mode)


__all__ = [
    "RollMode",
    "SaveRoll",
    "save_formula",
    "DiceRoller",
]
