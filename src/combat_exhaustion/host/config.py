"""Host-side rules configuration.

This is the global configuration table the host rules engine reads while
deriving actor state: the active rule edition, the condition types with
their exhaustion reduction constants, and the condition-effect table that
maps derived effects to the status ids (and ``exhaustion-N`` thresholds)
that trigger them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from combat_exhaustion.core.constants import (
    DEFAULT_CONDITION_NAME,
    DEFAULT_MAX_EXHAUSTION,
    DEFAULT_ROLL_REDUCTION,
    DEFAULT_SPEED_REDUCTION,
    EXHAUSTION_CONDITION,
    REFERENCE_LEGACY,
)
from combat_exhaustion.models.enums import RuleVersion


class Reduction(BaseModel):
    """Per-level exhaustion reduction constants.

    Attributes:
        rolls: d20 penalty per exhaustion level.
        speed: Speed penalty in feet per exhaustion level.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    rolls: int = DEFAULT_ROLL_REDUCTION
    speed: int = DEFAULT_SPEED_REDUCTION


class ConditionType(BaseModel):
    """A configured condition.

    Attributes:
        name: Display name or localization key.
        reference: Rules reference shown by tooltips and panels.
        levels: Number of levels for levelled conditions.
        reduction: Flat reduction constants, if the condition has any.
        description: Optional inline description.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str
    reference: str | None = None
    levels: int | None = None
    reduction: Reduction | None = None
    description: str | None = None


def _default_condition_types() -> dict[str, ConditionType]:
    return {
        EXHAUSTION_CONDITION: ConditionType(
            name=DEFAULT_CONDITION_NAME,
            reference=REFERENCE_LEGACY,
            levels=DEFAULT_MAX_EXHAUSTION,
            reduction=Reduction(),
        ),
        "poisoned": ConditionType(name="DND5E.ConPoisoned"),
        "prone": ConditionType(name="DND5E.ConProne"),
        "grappled": ConditionType(name="DND5E.ConGrappled"),
    }


def _default_condition_effects() -> dict[str, set[str]]:
    return {
        "abilityCheckDisadvantage": {"exhaustion-1", "frightened", "poisoned"},
        "halfMovement": {"exhaustion-2"},
        "attackDisadvantage": {
            "exhaustion-3", "blinded", "frightened", "poisoned", "prone", "restrained",
        },
        "abilitySaveDisadvantage": {"exhaustion-3"},
        "halfHealth": {"exhaustion-4"},
        "noMovement": {
            "exhaustion-5", "grappled", "paralyzed", "petrified", "restrained", "unconscious",
        },
        "crawl": {"prone", "exceedingCarryingCapacity"},
        "petrification": {"petrified"},
    }


class HostConfig(BaseModel):
    """Global rules configuration of the host.

    Attributes:
        rules_version: Exhaustion rule edition in effect.
        condition_types: Configured conditions keyed by id.
        condition_effects: Derived effect key to triggering status ids.
        movement_types: Movement channels the host derives.
        active_modules: Ids of other active modules (wrapping facility,
            inspection panel...).
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    rules_version: RuleVersion = RuleVersion.LEGACY
    condition_types: dict[str, ConditionType] = Field(default_factory=_default_condition_types)
    condition_effects: dict[str, set[str]] = Field(default_factory=_default_condition_effects)
    movement_types: list[str] = Field(
        default_factory=lambda: ["burrow", "climb", "fly", "swim", "walk"]
    )
    active_modules: set[str] = Field(default_factory=set)

    @property
    def exhaustion(self) -> ConditionType | None:
        return self.condition_types.get(EXHAUSTION_CONDITION)

    @property
    def max_exhaustion(self) -> int:
        """Configured exhaustion cap, 6 when unavailable."""
        condition = self.exhaustion
        if condition is None or condition.levels is None:
            return DEFAULT_MAX_EXHAUSTION
        return condition.levels

    def is_module_active(self, module_id: str) -> bool:
        return module_id in self.active_modules


__all__ = [
    "Reduction",
    "ConditionType",
    "HostConfig",
]
