"""Suppression registry for writes the module issues itself.

While the module writes to an actor, the actor id is held in the registry.
Event handlers check the registry first and ignore events for held actors,
so a session never reacts to its own corrective writes.

Holds are reference counted, so nested holds on the same actor are safe,
and are always released through ``hold()`` on every exit path.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager

from combat_exhaustion.core.exceptions import GuardError
from combat_exhaustion.core.logging import get_logger


logger = get_logger(__name__)


class GuardRegistry:
    """Process-wide set of actor ids with an internal write in flight.

    Example:
        >>> guard = GuardRegistry()
        >>> with guard.hold("actor-1"):
        ...     guard.is_guarded("actor-1")
        True
        >>> guard.is_guarded("actor-1")
        False
    """

    def __init__(self, name: str = "internal-update") -> None:
        self.name = name
        self._holds: Counter[str] = Counter()

    def is_guarded(self, actor_id: str) -> bool:
        return self._holds[actor_id] > 0

    def __contains__(self, actor_id: object) -> bool:
        return isinstance(actor_id, str) and self.is_guarded(actor_id)

    def __len__(self) -> int:
        return sum(1 for count in self._holds.values() if count > 0)

    def acquire(self, actor_id: str) -> None:
        self._holds[actor_id] += 1

    def release(self, actor_id: str) -> None:
        """Drop one hold on ``actor_id``.

        Raises:
            GuardError: If the actor is not held.
        """
        if self._holds[actor_id] <= 0:
            del self._holds[actor_id]
            raise GuardError("Guard released without a matching hold", actor_id=actor_id)
        self._holds[actor_id] -= 1
        if self._holds[actor_id] == 0:
            del self._holds[actor_id]

    @contextmanager
    def hold(self, actor_id: str) -> Iterator[None]:
        """Hold ``actor_id`` for the duration of the block."""
        self.acquire(actor_id)
        try:
            yield
        finally:
            self.release(actor_id)


GUARD_REGISTRY = GuardRegistry()
"""Default registry shared by the observer, resolver, and overlay."""


__all__ = [
    "GuardRegistry",
    "GUARD_REGISTRY",
]
