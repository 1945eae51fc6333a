"""In-memory host world: documents, sessions, and the hook bus.

``World`` is the reference implementation of the host collaborator the
module runs against. It stores actors and combats, applies dotted-path
updates, recomputes derived data, and delivers events to every connected
session in connection order. A handler that writes from inside an event
re-enters ``update_actor``; the resulting events are delivered before the
outer write returns, which is what the module's guard registry exists for.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any, Callable, Iterable, Protocol

from pydantic import ValidationError as PydanticValidationError

from combat_exhaustion.core.exceptions import DocumentNotFoundError, HostWriteError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.host.config import HostConfig
from combat_exhaustion.host.rules import HostRulesEngine
from combat_exhaustion.host.wrapping import (
    WRAPPER_FACILITY_ID,
    InterceptionRegistry,
    WrapperFacility,
)
from combat_exhaustion.models.actor import ActiveEffect, Actor, set_property
from combat_exhaustion.models.combat import Combat, Combatant
from combat_exhaustion.models.events import ActorMutated, CombatConcluded, Session
from combat_exhaustion.models.rolls import RollConfig, RollInvocation


logger = get_logger(__name__)

Handler = Callable[..., Any]


class DescriptionAccessor(Protocol):
    """Read-time override for active effect descriptions."""

    def read(self, effect: ActiveEffect) -> str: ...

    def write(self, effect: ActiveEffect, value: str) -> None: ...


class HookBus:
    """Named hooks for one session.

    Synchronous hooks run through ``call``; event hooks run through
    ``emit``, which awaits coroutine handlers in registration order.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[tuple[Handler, bool]]] = defaultdict(list)

    def on(self, name: str, fn: Handler) -> None:
        self._handlers[name].append((fn, False))

    def once(self, name: str, fn: Handler) -> None:
        self._handlers[name].append((fn, True))

    def off(self, name: str, fn: Handler) -> None:
        self._handlers[name] = [(h, o) for h, o in self._handlers[name] if h is not fn]

    def handlers(self, name: str) -> list[Handler]:
        return [fn for fn, _ in self._handlers.get(name, [])]

    def _take(self, name: str) -> list[Handler]:
        entries = list(self._handlers.get(name, []))
        self._handlers[name] = [(fn, once) for fn, once in entries if not once]
        return [fn for fn, _ in entries]

    def call(self, name: str, *args: Any) -> None:
        """Run synchronous handlers for ``name``."""
        for fn in self._take(name):
            fn(*args)

    async def emit(self, name: str, *args: Any) -> None:
        """Run handlers for ``name``, awaiting any that are coroutines."""
        for fn in self._take(name):
            result = fn(*args)
            if inspect.isawaitable(result):
                await result


class World:
    """Host document store shared by every connected session.

    Attributes:
        config: Global rules configuration.
        rules: Rules engine deriving actor state.
        render_log: Actor ids in the order their sheets were re-rendered.
        translations: Localization table; missing keys localize to themselves.
    """

    def __init__(
        self,
        config: HostConfig | None = None,
        *,
        facility: WrapperFacility | None = None,
        supports_roll_exhaustion: bool = True,
    ) -> None:
        self.config = config or HostConfig()
        use_facility = facility is not None and self.config.is_module_active(WRAPPER_FACILITY_ID)
        self.rules = HostRulesEngine(
            self.config,
            InterceptionRegistry(facility if use_facility else None),
            supports_roll_exhaustion=supports_roll_exhaustion,
        )
        self.render_log: list[str] = []
        self.translations: dict[str, str] = {}
        self.description_accessor: DescriptionAccessor | None = None
        self._actors: dict[str, Actor] = {}
        self._combats: dict[str, Combat] = {}
        self._sessions: list[tuple[Session, HookBus]] = []
        self._write_failures: list[tuple[str, str | None]] = []

    # ------------------------------------------------------------------
    # Sessions and hooks
    # ------------------------------------------------------------------

    def connect(self, session: Session) -> HookBus:
        """Connect a session and return its hook bus."""
        hooks = HookBus()
        self._sessions.append((session, hooks))
        logger.info("Session connected", session_id=session.id, privileged=session.is_privileged)
        return hooks

    @property
    def sessions(self) -> list[Session]:
        return [s for s, _ in self._sessions]

    def hooks_for(self, session: Session) -> HookBus:
        for connected, hooks in self._sessions:
            if connected.id == session.id:
                return hooks
        raise DocumentNotFoundError("Session not connected", document_id=session.id)

    def call_hook(self, name: str, *args: Any) -> None:
        """Run a synchronous hook on every session."""
        for _, hooks in self._sessions:
            hooks.call(name, *args)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_actor(self, actor: Actor) -> Actor:
        self._actors[actor.id] = actor
        self.rules.prepare_derived_data(actor)
        return actor

    def get_actor(self, actor_id: str) -> Actor:
        try:
            return self._actors[actor_id]
        except KeyError:
            raise DocumentNotFoundError("Actor not found", document_id=actor_id) from None

    def find_actor(self, actor_id: str | None) -> Actor | None:
        return self._actors.get(actor_id) if actor_id else None

    @property
    def actors(self) -> list[Actor]:
        return list(self._actors.values())

    def create_combat(self, actor_ids: Iterable[str | None], *, started: bool = False) -> Combat:
        combat = Combat(
            started=started,
            round=1 if started else 0,
            combatants=[Combatant(actor_id=actor_id) for actor_id in actor_ids],
        )
        self._combats[combat.id] = combat
        return combat

    def start_combat(self, combat_id: str) -> Combat:
        combat = self._get_combat(combat_id)
        combat.started = True
        combat.round = max(combat.round, 1)
        return combat

    @property
    def combats(self) -> list[Combat]:
        return list(self._combats.values())

    def _get_combat(self, combat_id: str) -> Combat:
        try:
            return self._combats[combat_id]
        except KeyError:
            raise DocumentNotFoundError("Combat not found", document_id=combat_id) from None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def fail_next_write(self, actor_id: str, path: str | None = None) -> None:
        """Make the next matching write raise ``HostWriteError``."""
        self._write_failures.append((actor_id, path))

    def _check_failure(self, actor_id: str, changes: dict[str, Any]) -> None:
        for index, (failing_id, path) in enumerate(self._write_failures):
            if failing_id == actor_id and (path is None or path in changes):
                del self._write_failures[index]
                raise HostWriteError("Document update rejected", actor_id=actor_id, path=path)

    async def update_actor(
        self,
        actor_id: str,
        changes: dict[str, Any],
        *,
        user_id: str,
        options: dict[str, Any] | None = None,
    ) -> Actor:
        """Apply dotted-path changes to an actor and broadcast the update.

        Args:
            actor_id: Actor to update.
            changes: Flat dotted-path changes.
            user_id: User performing the write.
            options: Update options; ``render=False`` skips the sheet render.

        Returns:
            The updated actor.

        Raises:
            DocumentNotFoundError: If the actor does not exist.
            HostWriteError: If the update is rejected or invalid.
        """
        actor = self.get_actor(actor_id)
        options = dict(options or {})
        self._check_failure(actor_id, changes)

        for session, hooks in self._sessions:
            if session.user_id == user_id:
                hooks.call("pre_update_actor", actor, changes, options, user_id)

        try:
            trial = actor.model_copy(deep=True)
            for path, value in changes.items():
                set_property(trial, path, value)
        except (KeyError, PydanticValidationError) as exc:
            raise HostWriteError(
                f"Invalid update: {exc}",
                actor_id=actor_id,
                details={"changes": changes},
            ) from exc
        for path, value in changes.items():
            set_property(actor, path, value)

        self.rules.prepare_derived_data(actor)
        if options.get("render", True):
            self.render(actor)

        for session, hooks in list(self._sessions):
            event = ActorMutated(
                actor=actor,
                changes=dict(changes),
                options=options,
                user_id=user_id,
                session=session,
            )
            await hooks.emit("update_actor", event)
        return actor

    async def set_flag(self, actor_id: str, scope: str, key: str, value: Any, *, user_id: str) -> Actor:
        return await self.update_actor(actor_id, {f"flags.{scope}.{key}": value}, user_id=user_id)

    async def unset_flag(self, actor_id: str, scope: str, key: str, *, user_id: str) -> Actor:
        return await self.update_actor(actor_id, {f"flags.{scope}.-={key}": None}, user_id=user_id)

    async def update_effect(
        self,
        actor_id: str,
        effect_id: str,
        changes: dict[str, Any],
        *,
        user_id: str,
    ) -> ActiveEffect:
        """Update an embedded active effect and re-derive its actor."""
        actor = self.get_actor(actor_id)
        effect = actor.get_effect(effect_id)
        if effect is None:
            raise DocumentNotFoundError("Active effect not found", document_id=effect_id)
        self._check_failure(actor_id, changes)
        try:
            for path, value in changes.items():
                set_property(effect, path, value)
        except (KeyError, PydanticValidationError) as exc:
            raise HostWriteError(f"Invalid effect update: {exc}", actor_id=actor_id) from exc
        self.rules.prepare_derived_data(actor)
        for _, hooks in list(self._sessions):
            await hooks.emit("update_active_effect", effect, changes, user_id)
        return effect

    async def delete_combat(self, combat_id: str) -> Combat:
        """Conclude a combat and notify every session once."""
        combat = self._combats.pop(combat_id, None)
        if combat is None:
            raise DocumentNotFoundError("Combat not found", document_id=combat_id)
        for session, hooks in list(self._sessions):
            await hooks.emit("delete_combat", CombatConcluded(combat=combat, session=session))
        return combat

    # ------------------------------------------------------------------
    # Presentation collaborators
    # ------------------------------------------------------------------

    def render(self, actor: Actor) -> None:
        self.render_log.append(actor.id)

    def localize(self, key: str) -> str:
        return self.translations.get(key, key)

    def effect_description(self, effect: ActiveEffect) -> str:
        """Description as an inspection panel reads it."""
        if self.description_accessor is not None:
            return self.description_accessor.read(effect)
        return effect.description

    def set_effect_description(self, effect: ActiveEffect, value: str) -> None:
        if self.description_accessor is not None:
            self.description_accessor.write(effect, value)
        else:
            effect.description = value

    # ------------------------------------------------------------------
    # Rolls
    # ------------------------------------------------------------------

    def construct_roll(
        self,
        actor: Actor,
        parts: list[str],
        data: dict[str, Any] | None = None,
        *,
        count: int = 1,
    ) -> list[RollInvocation]:
        """Build the concrete rolls for one action (``count`` > 1 for adv/dis)."""
        return self.rules.build_rolls(actor, parts, data, count=count)

    def pre_roll(self, actor: Actor, roll_config: RollConfig) -> RollConfig:
        """Run the ``pre_roll`` hook used by hosts without roll-penalty support."""
        self.call_hook("pre_roll", actor, roll_config)
        return roll_config


__all__ = [
    "DescriptionAccessor",
    "HookBus",
    "World",
]
