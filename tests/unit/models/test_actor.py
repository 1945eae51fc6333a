"""Tests for actor documents and dotted-path access."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from combat_exhaustion.models.actor import (
    ActiveEffect,
    Actor,
    ActorSystem,
    Attributes,
    HitPoints,
    get_property,
    set_property,
)


@pytest.fixture
def actor() -> Actor:
    return Actor(
        name="Thorin",
        owners={"player-1"},
        system=ActorSystem(attributes=Attributes(hp=HitPoints(value=7, max=12), exhaustion=2)),
    )


class TestDottedPaths:
    """Tests for get_property / set_property."""

    def test_read_nested_model(self, actor: Actor) -> None:
        """Test reading through nested models."""
        assert get_property(actor, "system.attributes.hp.value") == 7
        assert get_property(actor, "system.attributes.exhaustion") == 2

    def test_missing_path_returns_default(self, actor: Actor) -> None:
        """Test unknown segments return the default."""
        assert get_property(actor, "system.attributes.nope") is None
        assert get_property(actor, "flags.mod.key", 5) == 5

    def test_write_creates_flag_scope(self, actor: Actor) -> None:
        """Test writing a flag creates the scope mapping."""
        set_property(actor, "flags.combat-exhaustion.previousHp", 7)
        assert actor.get_flag("combat-exhaustion", "previousHp") == 7

    def test_delete_prefix_removes_key(self, actor: Actor) -> None:
        """Test a -= leaf removes the key."""
        set_property(actor, "flags.combat-exhaustion.firstDeathFail", True)
        set_property(actor, "flags.combat-exhaustion.-=firstDeathFail", None)
        assert actor.get_flag("combat-exhaustion", "firstDeathFail") is None

    def test_write_validates(self, actor: Actor) -> None:
        """Test model assignment is validated."""
        with pytest.raises(ValidationError):
            set_property(actor, "system.attributes.exhaustion", -1)

    def test_unknown_model_field_raises(self, actor: Actor) -> None:
        """Test writing an unknown model attribute raises KeyError."""
        with pytest.raises(KeyError):
            set_property(actor, "system.unknown.value", 1)


class TestActor:
    """Tests for the Actor document."""

    def test_convenience_properties(self, actor: Actor) -> None:
        """Test hp and exhaustion shortcuts."""
        assert actor.hp == 7
        assert actor.exhaustion_level == 2

    def test_ownership(self, actor: Actor) -> None:
        """Test ownership checks."""
        assert actor.is_owner("player-1")
        assert not actor.is_owner("player-2")

    def test_name_required(self) -> None:
        """Test actors need a name."""
        with pytest.raises(ValidationError):
            Actor(name="")

    def test_get_effect(self) -> None:
        """Test looking up an embedded effect."""
        effect = ActiveEffect(name="Blessed")
        actor = Actor(name="Aria", effects=[effect])
        assert actor.get_effect(effect.id) is effect
        assert actor.get_effect("missing") is None


class TestActiveEffect:
    """Tests for exhaustion effect recognition."""

    @pytest.mark.parametrize(
        "flags",
        [
            {"core": {"statusId": "exhaustion"}},
            {"dnd5e": {"conditionId": "exhaustion"}},
            {"dnd5e": {"conditionType": "exhaustion"}},
        ],
    )
    def test_flagged_as_exhaustion(self, flags: dict) -> None:
        """Test any of the condition flags marks the effect."""
        assert ActiveEffect(name="Condition", flags=flags).is_exhaustion

    def test_name_match_is_case_insensitive(self) -> None:
        """Test name matching on 'exhaust'."""
        assert ActiveEffect(name="Exhausted (Level 2)").is_exhaustion

    def test_other_effect(self) -> None:
        """Test unrelated effects are not exhaustion."""
        effect = ActiveEffect(name="Poisoned", flags={"core": {"statusId": "poisoned"}})
        assert not effect.is_exhaustion
