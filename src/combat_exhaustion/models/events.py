"""Events and session identity consumed by the exhaustion engine.

Each connected session receives its own copy of every host event, so the
events carry the receiving session rather than the session that caused
the change.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from combat_exhaustion.models.actor import Actor
from combat_exhaustion.models.combat import Combat


class Session(BaseModel):
    """A connected client session.

    Attributes:
        id: Session identifier.
        user_id: User the session is logged in as.
        is_privileged: Whether this is the authoritative (GM) session.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    is_privileged: bool = False


class ActorMutated(BaseModel):
    """An actor document was updated.

    Attributes:
        actor: The actor after the update applied.
        changes: Flat dotted-path changes that were written.
        options: Host update options (``diff``, ``render``...).
        user_id: User whose write produced this event.
        session: The session receiving the event.
    """

    model_config = ConfigDict(extra="forbid")

    actor: Actor
    changes: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)
    user_id: str
    session: Session

    def touches(self, path: str) -> bool:
        """Whether ``path`` was part of this update."""
        return path in self.changes


class CombatConcluded(BaseModel):
    """A combat was deleted or concluded.

    Attributes:
        combat: Final state of the combat.
        session: The session receiving the event.
    """

    model_config = ConfigDict(extra="forbid")

    combat: Combat
    session: Session


__all__ = [
    "Session",
    "ActorMutated",
    "CombatConcluded",
]
