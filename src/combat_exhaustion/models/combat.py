"""Pydantic V2 schemas for combat encounters as the host exposes them."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid4().hex[:16]


class Combatant(BaseModel):
    """Link between a combat and an actor.

    Attributes:
        id: Combatant identifier.
        actor_id: Linked actor, or None for tokens without an actor.
        name: Display name in the tracker.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    actor_id: str | None = Field(default=None, description="Linked actor")
    name: str = Field(default="", description="Display name")


class Combat(BaseModel):
    """A combat encounter.

    Attributes:
        id: Combat identifier.
        started: Whether the first round has begun.
        round: Current round number.
        combatants: Participants of this combat.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    started: bool = Field(default=False, description="Combat has started")
    round: int = Field(default=0, ge=0, description="Current round")
    combatants: list[Combatant] = Field(default_factory=list)

    def has_actor(self, actor_id: str) -> bool:
        return any(c.actor_id == actor_id for c in self.combatants)


__all__ = [
    "Combatant",
    "Combat",
]
