"""Constitution saving throws that can cancel an exhaustion accrual.

A prompt is any async callable that asks for a saving throw and returns the
roll totals (or None when the roll was cancelled). The gate turns that into
pass/fail, treating anything other than a usable first total as a failed
save so accrual is never skipped by accident.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from combat_exhaustion.core.constants import DEFAULT_SAVE_DC
from combat_exhaustion.core.exceptions import DiceRollError, SavingThrowError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.engine.dice import DiceRoller
from combat_exhaustion.models.enums import Ability


if TYPE_CHECKING:
    from combat_exhaustion.models.actor import Actor

logger = get_logger(__name__)


class SavingThrowPrompt(Protocol):
    """Collaborator that performs a saving throw for an actor."""

    async def __call__(self, actor: Actor, ability: Ability, dc: int) -> list[int] | None: ...


class DiceSavingThrowPrompt:
    """Roll saves directly with the actor's saving throw bonus."""

    def __init__(self, roller: DiceRoller | None = None) -> None:
        self._roller = roller or DiceRoller()

    async def __call__(self, actor: Actor, ability: Ability, dc: int) -> list[int] | None:
        bonus = actor.system.saves.get(ability.value, 0)
        result = self._roller.roll_save(bonus)
        logger.info(
            f"{ability.full_name} Saving Throw (DC {dc})",
            actor=actor.name,
            total=result.total,
            natural=result.natural,
        )
        return [result.total]


class SavingThrowGate:
    """Converts an accrual candidate into a confirmed accrual.

    Never call ``request`` while holding a guard on the actor: the prompt
    may wait on a player for as long as it likes.
    """

    def __init__(self, prompt: SavingThrowPrompt | None = None) -> None:
        self.prompt: SavingThrowPrompt = prompt or DiceSavingThrowPrompt()

    async def request(self, actor: Actor, dc: int | None) -> bool:
        """Ask for a Constitution save.

        Args:
            actor: Actor making the save.
            dc: Difficulty class; the default DC is used when None.

        Returns:
            True if the save succeeded; False on failure, cancellation, or
            a prompt error.
        """
        target = int(dc if dc is not None else DEFAULT_SAVE_DC)
        try:
            rolls = await self.prompt(actor, Ability.CON, target)
        except (SavingThrowError, DiceRollError) as exc:
            logger.warning(
                "Con save errored, treating as failure", actor=actor.name, error=str(exc)
            )
            return False
        except Exception:
            logger.exception(
                "Con save prompt failed, treating as failure", actor=actor.name, dc=target
            )
            return False

        if not rolls:
            logger.debug("Con save cancelled or returned nothing", actor=actor.name)
            return False

        success = rolls[0] >= target
        logger.debug(
            "Con save resolved",
            actor=actor.name,
            total=rolls[0],
            dc=target,
            result="pass" if success else "fail",
        )
        return success


__all__ = [
    "SavingThrowPrompt",
    "DiceSavingThrowPrompt",
    "SavingThrowGate",
]
