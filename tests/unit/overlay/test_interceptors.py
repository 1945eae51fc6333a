"""Tests for the rule-version interceptors."""

from __future__ import annotations

from typing import Any

import pytest

from combat_exhaustion.host.config import HostConfig
from combat_exhaustion.models.actor import Actor, ActorSystem, Attributes
from combat_exhaustion.models.enums import RuleVersion
from combat_exhaustion.models.rolls import RollConfig, RollInvocation
from combat_exhaustion.overlay.interceptors import (
    ConditionEffectInterceptor,
    MovementInterceptor,
    PreRollFallback,
    RollPenaltyInterceptor,
    strip_roll_penalty,
)
from combat_exhaustion.overlay.state import OverlayState


def exhausted(level: int, **fields: Any) -> Actor:
    return Actor(
        name="Thorin",
        system=ActorSystem(attributes=Attributes(exhaustion=level)),
        **fields,
    )


def make_state(settings: Any, version: RuleVersion, *, swap: bool = True) -> OverlayState:
    settings.update(exhaustion_override_swap=swap)
    return OverlayState(HostConfig(rules_version=version), settings)


class Recorder:
    """Wrapped implementation that records calls and returns a fixed value."""

    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.calls = 0

    def __call__(self, *args: Any) -> Any:
        self.calls += 1
        return self.value


class TestOverlayState:
    """Tests for direction computation."""

    def test_direction_tracks_settings(self, settings: Any) -> None:
        """Test the direction is recomputed on every read."""
        state = make_state(settings, RuleVersion.LEGACY, swap=False)
        assert not state.force_modern()

        settings.update(exhaustion_override_swap=True)
        assert state.force_modern()
        assert not state.force_legacy()


class TestConditionEffectInterceptor:
    """Tests for the condition-effect lookup."""

    def test_swap_off_defers(self, settings: Any) -> None:
        """Test the host answers when the toggle is off."""
        wrapped = Recorder(True)
        state = make_state(settings, RuleVersion.MODERN, swap=False)
        interceptor = ConditionEffectInterceptor(state)

        assert interceptor(wrapped, exhausted(0), "halfMovement") is True
        assert wrapped.calls == 1

    def test_keys_without_thresholds_defer(self, settings: Any) -> None:
        """Test keys with no exhaustion entries always go to the host."""
        wrapped = Recorder(False)
        interceptor = ConditionEffectInterceptor(make_state(settings, RuleVersion.MODERN))

        assert interceptor(wrapped, exhausted(5), "crawl") is False
        assert interceptor(wrapped, exhausted(5), "unknownKey") is False
        assert wrapped.calls == 2

    def test_force_legacy_synthesizes(self, settings: Any) -> None:
        """Test a modern host answers from exhaustion thresholds."""
        interceptor = ConditionEffectInterceptor(make_state(settings, RuleVersion.MODERN))
        wrapped = Recorder(False)

        assert interceptor(wrapped, exhausted(2), "halfMovement") is True
        assert interceptor(wrapped, exhausted(1), "halfMovement") is False
        assert wrapped.calls == 0

    def test_force_legacy_immunity_is_explicit_only(self, settings: Any) -> None:
        """Test immunity to exhaustion falls back to explicit statuses."""
        interceptor = ConditionEffectInterceptor(make_state(settings, RuleVersion.MODERN))
        actor = exhausted(5, statuses={"grappled"})
        actor.system.traits.ci = {"exhaustion"}

        assert interceptor(Recorder(), actor, "noMovement") is True
        assert interceptor(Recorder(), actor, "halfMovement") is False

    def test_force_modern_suppresses_synthesis(self, settings: Any) -> None:
        """Test a legacy host ignores thresholds and keeps explicit statuses."""
        interceptor = ConditionEffectInterceptor(make_state(settings, RuleVersion.LEGACY))

        assert interceptor(Recorder(True), exhausted(5), "noMovement") is False
        assert interceptor(Recorder(), exhausted(0, statuses={"grappled"}), "noMovement") is True

    def test_explicit_status_respects_immunity(self, settings: Any) -> None:
        """Test an explicit status the actor is immune to does not count."""
        interceptor = ConditionEffectInterceptor(make_state(settings, RuleVersion.LEGACY))
        actor = exhausted(0, statuses={"grappled"})
        actor.system.traits.ci = {"grappled"}

        assert interceptor(Recorder(), actor, "noMovement") is False


class TestRollPenaltyInterceptor:
    """Tests for roll-penalty injection."""

    def test_force_modern_injects_once(self, settings: Any) -> None:
        """Test a legacy host gets -2 per level, once per invocation."""
        interceptor = RollPenaltyInterceptor(make_state(settings, RuleVersion.LEGACY))
        actor = exhausted(3)
        invocation = RollInvocation(parts=["1d20", "@mod"])

        interceptor(Recorder(), actor, invocation)
        interceptor(Recorder(), actor, invocation)

        assert invocation.parts == ["1d20", "@mod", "@exhaustion"]
        assert invocation.data["exhaustion"] == -6
        assert invocation.exhaustion_applied

    def test_force_legacy_strips_host_term(self, settings: Any) -> None:
        """Test a modern host's penalty is removed."""
        interceptor = RollPenaltyInterceptor(make_state(settings, RuleVersion.MODERN))
        invocation = RollInvocation()

        def host(actor: Actor, inv: RollInvocation) -> None:
            inv.parts.append("@exhaustion")
            inv.data["exhaustion"] = -4

        interceptor(host, exhausted(2), invocation)

        assert invocation.parts == ["1d20"]
        assert invocation.data["exhaustion"] == 0

    def test_untouched_without_exhaustion(self, settings: Any) -> None:
        """Test level 0 rolls are left alone and not marked."""
        interceptor = RollPenaltyInterceptor(make_state(settings, RuleVersion.LEGACY))
        invocation = RollInvocation()

        interceptor(Recorder(), exhausted(0), invocation)

        assert invocation == RollInvocation()

    def test_swap_off_untouched(self, settings: Any) -> None:
        """Test nothing changes with the toggle off."""
        interceptor = RollPenaltyInterceptor(make_state(settings, RuleVersion.LEGACY, swap=False))
        invocation = RollInvocation()

        interceptor(Recorder(), exhausted(3), invocation)

        assert invocation.parts == ["1d20"]
        assert not invocation.exhaustion_applied

    def test_strip_ignores_non_numeric(self) -> None:
        """Test only numeric substitution values are zeroed."""
        invocation = RollInvocation(parts=["1d20", "@exhaustion"], data={"exhaustion": "x"})
        strip_roll_penalty(invocation)
        assert invocation.parts == ["1d20"]
        assert invocation.data["exhaustion"] == "x"


class TestPreRollFallback:
    """Tests for the pre_roll fallback."""

    def test_applies_flat_penalty_once(self, settings: Any) -> None:
        """Test the penalty, flavor, and disadvantage handling."""
        fallback = PreRollFallback(make_state(settings, RuleVersion.LEGACY))
        config = RollConfig(parts=["1d20"], flavor="Strength Check", disadvantage=True)

        fallback(exhausted(2), config)
        fallback(exhausted(2), config)

        assert config.parts == ["1d20", -4]
        assert config.flavor == "Strength Check • Exhausted (2024): -4"
        assert config.disadvantage is False

    def test_leaves_unset_disadvantage(self, settings: Any) -> None:
        """Test a None disadvantage flag stays None."""
        fallback = PreRollFallback(make_state(settings, RuleVersion.LEGACY))
        config = RollConfig()

        fallback(exhausted(1), config)

        assert config.flavor == "Exhausted (2024): -2"
        assert config.disadvantage is None

    @pytest.mark.parametrize("version", [RuleVersion.MODERN, RuleVersion.LEGACY])
    def test_inactive_directions(self, settings: Any, version: RuleVersion) -> None:
        """Test nothing happens unless forcing the modern table."""
        swap = version == RuleVersion.MODERN
        fallback = PreRollFallback(make_state(settings, version, swap=swap))
        config = RollConfig(parts=["1d20"])

        fallback(exhausted(3), config)

        assert config.parts == ["1d20"]


class TestMovementInterceptor:
    """Tests for the derived-movement recompute."""

    def derive(self, actor: Actor, speeds: dict[str, float]) -> None:
        actor.system.attributes.movement = dict(speeds)

    def test_force_modern_subtracts_flat(self, settings: Any) -> None:
        """Test 5 ft per level comes off positive channels, floored at 0."""
        interceptor = MovementInterceptor(make_state(settings, RuleVersion.LEGACY))
        actor = exhausted(3)

        interceptor(
            lambda a: self.derive(a, {"walk": 30.0, "fly": 10.0, "swim": 0.0}),
            actor,
        )

        assert actor.movement == {"walk": 15.0, "fly": 0.0, "swim": 0.0}

    def test_nested_recompute_skipped(self, settings: Any) -> None:
        """Test a re-entrant recompute of the same actor is not adjusted."""
        interceptor = MovementInterceptor(make_state(settings, RuleVersion.LEGACY))
        actor = exhausted(1)
        depth: list[int] = []

        def host(a: Actor) -> None:
            depth.append(len(depth))
            self.derive(a, {"walk": 30.0})
            if len(depth) == 1:
                interceptor(host, a)

        interceptor(host, actor)

        assert depth == [0, 1]
        assert actor.movement["walk"] == 25.0
        assert not interceptor.in_progress.is_guarded(actor.id)

    def test_other_directions_untouched(self, settings: Any) -> None:
        """Test force2014 leaves the host's movement alone."""
        interceptor = MovementInterceptor(make_state(settings, RuleVersion.MODERN))
        actor = exhausted(2)

        interceptor(lambda a: self.derive(a, {"walk": 20.0}), actor)

        assert actor.movement == {"walk": 20.0}
