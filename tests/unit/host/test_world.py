"""Tests for the in-memory host world."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from combat_exhaustion.core.exceptions import DocumentNotFoundError, HostWriteError
from combat_exhaustion.host.config import HostConfig
from combat_exhaustion.host.world import HookBus, World
from combat_exhaustion.host.wrapping import WrapperChain
from combat_exhaustion.models.actor import ActiveEffect, Actor
from combat_exhaustion.models.events import ActorMutated, Session


HP = "system.attributes.hp.value"


class TestHookBus:
    """Tests for per-session hooks."""

    def test_once_handlers_run_once(self) -> None:
        """Test once handlers are dropped after their first call."""
        bus = HookBus()
        calls: list[int] = []
        bus.once("ready", lambda: calls.append(1))

        bus.call("ready")
        bus.call("ready")

        assert calls == [1]

    def test_emit_awaits_coroutines(self) -> None:
        """Test async handlers are awaited in order."""
        bus = HookBus()
        seen: list[str] = []

        async def first(value: str) -> None:
            seen.append(f"a:{value}")

        bus.on("event", first)
        bus.on("event", lambda value: seen.append(f"b:{value}"))

        asyncio.run(bus.emit("event", "x"))

        assert seen == ["a:x", "b:x"]

    def test_off(self) -> None:
        """Test handlers can be removed."""
        bus = HookBus()
        def handler() -> None:
            return None

        bus.on("event", handler)
        bus.off("event", handler)
        assert bus.handlers("event") == []


class TestWorldDocuments:
    """Tests for actor and combat storage."""

    def test_get_missing_actor(self, world: World) -> None:
        """Test missing actors raise DocumentNotFoundError."""
        with pytest.raises(DocumentNotFoundError):
            world.get_actor("missing")
        assert world.find_actor("missing") is None
        assert world.find_actor(None) is None

    def test_combat_lifecycle(self, world: World, make_actor: Callable[..., Actor]) -> None:
        """Test creating, starting and deleting a combat."""
        actor = make_actor()
        combat = world.create_combat([actor.id])
        assert not combat.started

        world.start_combat(combat.id)
        assert combat.started and combat.round == 1

        asyncio.run(world.delete_combat(combat.id))
        assert world.combats == []

    def test_delete_missing_combat(self, world: World) -> None:
        """Test deleting an unknown combat raises."""
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(world.delete_combat("missing"))

    def test_facility_requires_active_module(self) -> None:
        """Test the wrapping facility is only used when its module is active."""
        inactive = World(HostConfig(), facility=WrapperChain())
        active = World(HostConfig(active_modules={"lib-wrapper"}), facility=WrapperChain())

        assert not inactive.rules.interceptions.uses_facility
        assert active.rules.interceptions.uses_facility


class TestWorldUpdates:
    """Tests for the update channel."""

    def test_update_broadcasts_to_every_session(
        self, world: World, make_actor: Callable[..., Actor]
    ) -> None:
        """Test each connected session receives its own event."""
        actor = make_actor()
        received: list[tuple[str, dict[str, Any]]] = []
        for session_id in ("s1", "s2"):
            hooks = world.connect(Session(id=session_id, user_id=session_id))
            hooks.on(
                "update_actor",
                lambda event: received.append((event.session.id, event.changes)),
            )

        asyncio.run(world.update_actor(actor.id, {HP: 3}, user_id="gm"))

        assert actor.hp == 3
        assert received == [("s1", {HP: 3}), ("s2", {HP: 3})]

    def test_pre_update_only_for_writing_user(
        self, world: World, make_actor: Callable[..., Actor]
    ) -> None:
        """Test pre-update hooks see the old value, on the writer's session only."""
        actor = make_actor(hp=8)
        seen: dict[str, int] = {}
        for user in ("gm", "player-1"):

            def snapshot(a: Actor, changes: Any, options: Any, uid: str, user: str = user) -> None:
                seen[user] = a.hp

            world.connect(Session(id=f"s-{user}", user_id=user)).on("pre_update_actor", snapshot)

        asyncio.run(world.update_actor(actor.id, {HP: 2}, user_id="player-1"))

        assert seen == {"player-1": 8}

    def test_nested_write_delivered_before_outer_returns(
        self, world: World, make_actor: Callable[..., Actor]
    ) -> None:
        """Test a handler's write re-enters the update channel."""
        actor = make_actor()
        order: list[int] = []
        hooks = world.connect(Session(id="s1", user_id="gm"))

        async def handler(event: ActorMutated) -> None:
            order.append(event.changes[HP])
            if event.changes[HP] == 1:
                await world.update_actor(actor.id, {HP: 2}, user_id="gm")

        hooks.on("update_actor", handler)
        asyncio.run(world.update_actor(actor.id, {HP: 1}, user_id="gm"))

        assert order == [1, 2]

    def test_invalid_update_rejected_atomically(
        self, world: World, make_actor: Callable[..., Actor]
    ) -> None:
        """Test a failing change leaves the actor untouched."""
        actor = make_actor(hp=5)

        with pytest.raises(HostWriteError):
            asyncio.run(
                world.update_actor(
                    actor.id,
                    {HP: 1, "system.attributes.exhaustion": -3},
                    user_id="gm",
                )
            )

        assert actor.hp == 5

    def test_injected_failure(self, world: World, make_actor: Callable[..., Actor]) -> None:
        """Test fail_next_write rejects only the next matching write."""
        actor = make_actor(hp=5)
        world.fail_next_write(actor.id, HP)

        with pytest.raises(HostWriteError):
            asyncio.run(world.update_actor(actor.id, {HP: 1}, user_id="gm"))
        asyncio.run(world.update_actor(actor.id, {HP: 1}, user_id="gm"))

        assert actor.hp == 1

    def test_render_option(self, world: World, make_actor: Callable[..., Actor]) -> None:
        """Test render=False skips the sheet render."""
        actor = make_actor()
        asyncio.run(world.update_actor(actor.id, {HP: 4}, user_id="gm", options={"render": False}))
        assert world.render_log == []

        asyncio.run(world.update_actor(actor.id, {HP: 5}, user_id="gm"))
        assert world.render_log == [actor.id]

    def test_flags(self, world: World, make_actor: Callable[..., Actor]) -> None:
        """Test setting and unsetting module flags."""
        actor = make_actor()
        asyncio.run(world.set_flag(actor.id, "mod", "key", 3, user_id="gm"))
        assert actor.get_flag("mod", "key") == 3

        asyncio.run(world.unset_flag(actor.id, "mod", "key", user_id="gm"))
        assert actor.get_flag("mod", "key") is None


class TestPresentation:
    """Tests for localization and effect descriptions."""

    def test_localize_falls_back_to_key(self, world: World) -> None:
        """Test missing translations return the key."""
        world.translations["a.b"] = "Text"
        assert world.localize("a.b") == "Text"
        assert world.localize("c.d") == "c.d"

    def test_effect_description_without_accessor(self, world: World) -> None:
        """Test descriptions read from the stored value by default."""
        effect = ActiveEffect(name="Exhaustion", description="stored")
        world.set_effect_description(effect, "new")
        assert world.effect_description(effect) == "new"
