"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the combat exhaustion test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import pytest

from combat_exhaustion.core.config import ExhaustionSettings, clear_settings_cache
from combat_exhaustion.engine.guard import GuardRegistry
from combat_exhaustion.host.config import HostConfig
from combat_exhaustion.host.world import World
from combat_exhaustion.models.actor import Actor, ActorSystem, Attributes, HitPoints
from combat_exhaustion.models.enums import Ability, RuleVersion
from combat_exhaustion.models.events import Session
from combat_exhaustion.module import ExhaustionModule


if TYPE_CHECKING:
    from collections.abc import Generator


GM_USER = "gm"
PLAYER_USER = "player-1"


# =============================================================================
# Test Doubles
# =============================================================================


class SettingsBox:
    """Mutable settings provider so a scenario can change settings midway."""

    def __init__(self, **overrides: Any) -> None:
        self.current = ExhaustionSettings(**overrides)

    def __call__(self) -> ExhaustionSettings:
        return self.current

    def update(self, **overrides: Any) -> None:
        self.current = ExhaustionSettings(**{**self.current.model_dump(), **overrides})


class ScriptedPrompt:
    """Saving-throw prompt that answers from a script.

    Each scripted entry is a list of totals, None (cancelled), or an
    exception to raise. An exhausted script answers None.
    """

    def __init__(self) -> None:
        self.script: list[Any] = []
        self.calls: list[tuple[str, Ability, int]] = []

    def answer(self, *entries: Any) -> None:
        self.script.extend(entries)

    async def __call__(self, actor: Actor, ability: Ability, dc: int) -> list[int] | None:
        self.calls.append((actor.id, ability, dc))
        if not self.script:
            return None
        entry = self.script.pop(0)
        if isinstance(entry, Exception):
            raise entry
        return entry


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> SettingsBox:
    """Provide a mutable settings provider with module defaults.

    Returns:
        SettingsBox holding default ExhaustionSettings.
    """
    return SettingsBox()


@pytest.fixture
def prompt() -> ScriptedPrompt:
    """Provide a scripted saving-throw prompt.

    Returns:
        ScriptedPrompt with an empty script.
    """
    return ScriptedPrompt()


# =============================================================================
# Host Fixtures
# =============================================================================


@pytest.fixture
def host_config() -> HostConfig:
    """Provide a legacy-edition host configuration.

    Returns:
        HostConfig with the default condition tables.
    """
    return HostConfig(rules_version=RuleVersion.LEGACY)


@pytest.fixture
def world(host_config: HostConfig) -> World:
    """Create an empty host world.

    Args:
        host_config: Host configuration.

    Returns:
        World instance.
    """
    return World(host_config)


@pytest.fixture
def gm_session() -> Session:
    return Session(id="session-gm", user_id=GM_USER, is_privileged=True)


@pytest.fixture
def player_session() -> Session:
    return Session(id="session-player", user_id=PLAYER_USER)


@pytest.fixture
def guard() -> GuardRegistry:
    """Provide a guard registry isolated from the process-wide default."""
    return GuardRegistry("test")


@pytest.fixture
def make_actor(world: World) -> Callable[..., Actor]:
    """Provide a factory that creates actors inside the world.

    Args:
        world: Host world the actors are added to.

    Returns:
        Factory accepting name, hp, exhaustion, owners and extra fields.
    """

    def factory(
        name: str = "Thorin",
        *,
        hp: int = 10,
        exhaustion: int = 0,
        owners: set[str] | None = None,
        **fields: Any,
    ) -> Actor:
        actor = Actor(
            name=name,
            owners={PLAYER_USER} if owners is None else owners,
            system=ActorSystem(
                attributes=Attributes(
                    hp=HitPoints(value=hp, max=max(hp, 10)),
                    exhaustion=exhaustion,
                ),
            ),
            **fields,
        )
        return world.add_actor(actor)

    return factory


# =============================================================================
# Module Fixtures
# =============================================================================


@pytest.fixture
def gm_module(
    world: World,
    gm_session: Session,
    settings: SettingsBox,
    prompt: ScriptedPrompt,
    guard: GuardRegistry,
) -> ExhaustionModule:
    """Create the privileged session's module, initialized and set up.

    Returns:
        ExhaustionModule for the GM session (``ready`` not yet run).
    """
    module = ExhaustionModule(
        world,
        gm_session,
        settings_provider=settings,
        prompt=prompt,
        guard=guard,
    )
    module.init()
    module.setup()
    return module


@pytest.fixture
def player_module(
    world: World,
    player_session: Session,
    settings: SettingsBox,
    prompt: ScriptedPrompt,
    guard: GuardRegistry,
    gm_module: ExhaustionModule,
) -> ExhaustionModule:
    """Create a player session's module connected after the GM's.

    Returns:
        ExhaustionModule for the player session.
    """
    module = ExhaustionModule(
        world,
        player_session,
        settings_provider=settings,
        prompt=prompt,
        guard=guard,
    )
    module.init()
    module.setup()
    return module
