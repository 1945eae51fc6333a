"""Pydantic V2 schemas for host actor documents.

The host owns these documents; the module only reads them and asks the host
to write dotted-path changes. ``get_property``/``set_property`` implement the
dotted-path access the host update channel uses.
"""

from __future__ import annotations

from typing import Annotated, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from combat_exhaustion.core.constants import EXHAUSTION_CONDITION


DELETE_PREFIX = "-="
"""Path segment prefix that removes a key instead of setting it."""


def _new_id() -> str:
    return uuid4().hex[:16]


# =============================================================================
# Dotted-path helpers
# =============================================================================


def get_property(obj: Any, path: str, default: Any = None) -> Any:
    """Read a dotted path from nested models and mappings.

    Args:
        obj: Root model or mapping.
        path: Dotted path such as ``system.attributes.hp.value``.
        default: Value returned when any segment is missing.

    Returns:
        The value at ``path`` or ``default``.
    """
    current = obj
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, BaseModel) and segment in type(current).model_fields:
            current = getattr(current, segment)
        else:
            return default
    return current


def set_property(obj: Any, path: str, value: Any) -> None:
    """Write a dotted path, creating intermediate mappings as needed.

    A final segment starting with ``-=`` deletes that key from its parent
    mapping.

    Args:
        obj: Root model or mapping.
        path: Dotted path to write.
        value: Value to assign (ignored for deletions).

    Raises:
        KeyError: If an intermediate model attribute does not exist.
    """
    *parents, leaf = path.split(".")
    current = obj
    for segment in parents:
        if isinstance(current, dict):
            current = current.setdefault(segment, {})
        elif isinstance(current, BaseModel) and segment in type(current).model_fields:
            current = getattr(current, segment)
        else:
            raise KeyError(path)

    if leaf.startswith(DELETE_PREFIX):
        if isinstance(current, dict):
            current.pop(leaf[len(DELETE_PREFIX):], None)
        return

    if isinstance(current, dict):
        current[leaf] = value
    elif isinstance(current, BaseModel) and leaf in type(current).model_fields:
        setattr(current, leaf, value)
    else:
        raise KeyError(path)


# =============================================================================
# Actor system data
# =============================================================================


class HitPoints(BaseModel):
    """Hit point pool."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    value: int = Field(default=0, description="Current HP")
    max: Annotated[int, Field(ge=0, description="Maximum HP")] = 10


class DeathSaves(BaseModel):
    """Death saving throw counters."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    success: Annotated[int, Field(ge=0)] = 0
    failure: Annotated[int, Field(ge=0)] = 0


class Attributes(BaseModel):
    """Derived and stored actor attributes.

    Attributes:
        hp: Hit points.
        death: Death save counters.
        exhaustion: Exhaustion level.
        movement: Derived movement speeds in feet, recomputed by the host.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    hp: HitPoints = Field(default_factory=HitPoints)
    death: DeathSaves = Field(default_factory=DeathSaves)
    exhaustion: Annotated[int, Field(ge=0)] = 0
    movement: dict[str, float] = Field(default_factory=dict)


class Traits(BaseModel):
    """Actor traits the overlay reads.

    Attributes:
        ci: Condition immunities (status ids).
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    ci: set[str] = Field(default_factory=set)


class ActorSystem(BaseModel):
    """Game-system data block of an actor."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    attributes: Attributes = Field(default_factory=Attributes)
    traits: Traits = Field(default_factory=Traits)
    saves: dict[str, int] = Field(
        default_factory=lambda: {"con": 0},
        description="Saving throw bonuses keyed by ability id",
    )


# =============================================================================
# Documents
# =============================================================================


class ActiveEffect(BaseModel):
    """An effect embedded in an actor.

    Attributes:
        id: Effect identifier.
        name: Display name.
        flags: Namespaced flags (``core.statusId``, ``dnd5e.conditionId``...).
        changes: Baked-in change payloads the host applies on prepare.
        description: Stored description text.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    name: str = ""
    flags: dict[str, dict[str, Any]] = Field(default_factory=dict)
    changes: list[dict[str, Any]] = Field(default_factory=list)
    description: str = ""

    @property
    def is_exhaustion(self) -> bool:
        """Whether this effect represents the exhaustion condition."""
        tagged = (
            get_property(self.flags, "core.statusId"),
            get_property(self.flags, "dnd5e.conditionId"),
            get_property(self.flags, "dnd5e.conditionType"),
        )
        return EXHAUSTION_CONDITION in tagged or "exhaust" in self.name.lower()


class Actor(BaseModel):
    """A host actor document.

    Attributes:
        id: Document identifier.
        name: Display name.
        owners: User ids with ownership of this actor.
        system: Game-system data.
        base_movement: Source movement speeds before derivation.
        flags: Module-scoped flags, keyed by scope then key.
        statuses: Explicit status ids currently applied.
        effects: Embedded active effects.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1, max_length=100)
    owners: set[str] = Field(default_factory=set)
    system: ActorSystem = Field(default_factory=ActorSystem)
    base_movement: dict[str, float] = Field(default_factory=lambda: {"walk": 30.0})
    flags: dict[str, dict[str, Any]] = Field(default_factory=dict)
    statuses: set[str] = Field(default_factory=set)
    effects: list[ActiveEffect] = Field(default_factory=list)

    @property
    def hp(self) -> int:
        return self.system.attributes.hp.value

    @property
    def exhaustion_level(self) -> int:
        """Stored exhaustion level, coerced to a non-negative int."""
        try:
            return int(self.system.attributes.exhaustion or 0)
        except (TypeError, ValueError):
            return 0

    @property
    def movement(self) -> dict[str, float]:
        return self.system.attributes.movement

    def get_flag(self, scope: str, key: str) -> Any:
        """Read a module-scoped flag.

        Args:
            scope: Flag namespace (the module id).
            key: Flag name.

        Returns:
            The stored value, or None when unset.
        """
        return self.flags.get(scope, {}).get(key)

    def is_owner(self, user_id: str) -> bool:
        return user_id in self.owners

    def get_effect(self, effect_id: str) -> ActiveEffect | None:
        return next((e for e in self.effects if e.id == effect_id), None)


__all__ = [
    "DELETE_PREFIX",
    "get_property",
    "set_property",
    "HitPoints",
    "DeathSaves",
    "Attributes",
    "Traits",
    "ActorSystem",
    "ActiveEffect",
    "Actor",
]
