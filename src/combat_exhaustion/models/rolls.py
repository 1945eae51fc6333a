"""Roll construction context passed through the roll-penalty computation.

The host builds one ``RollInvocation`` per concrete roll. An advantage or
disadvantage roll produces several invocations for one user action, each
with its own substitution data and its own ``exhaustion_applied`` marker.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RollInvocation(BaseModel):
    """Formula parts and substitution data for one constructed roll.

    Attributes:
        parts: Formula terms, e.g. ``["1d20", "@mod", "@exhaustion"]``.
        data: Substitution values referenced by ``@`` terms.
        exhaustion_applied: Set once the overlay has adjusted this roll.
    """

    model_config = ConfigDict(extra="forbid")

    parts: list[str] = Field(default_factory=lambda: ["1d20"])
    data: dict[str, Any] = Field(default_factory=dict)
    exhaustion_applied: bool = False

    @property
    def formula(self) -> str:
        return " + ".join(self.parts)


class RollConfig(BaseModel):
    """Roll configuration seen by the host's ``pre_roll`` hook.

    Only used when the host has no roll-penalty computation to intercept.
    """

    model_config = ConfigDict(extra="forbid")

    parts: list[str | int] = Field(default_factory=list)
    flavor: str = ""
    disadvantage: bool | None = None
    exhaustion_applied: bool = False


__all__ = [
    "RollInvocation",
    "RollConfig",
]
