"""Unit tests for unit creation and attrition rules."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kingdoms.domain import units
from kingdoms.domain.enums import UnitCondition, UnitType


@pytest.mark.parametrize(
    ("tier", "unit_type", "attacks", "damage", "casualty_die"),
    [
        (1, UnitType.INFANTRY, 1, 1, 1),
        (2, UnitType.INFANTRY, 1, 1, 2),
        (3, UnitType.INFANTRY, 2, 2, 3),
        (5, UnitType.INFANTRY, 3, 3, 5),
        (3, UnitType.CAVALRY, 2, 3, 3),
        (1, UnitType.ARTILLERY, 1, 2, 1),
        (4, UnitType.ARTILLERY, 1, 3, 3),
        (2, UnitType.AERIAL, 1, 1, 1),
    ],
)
def test_derived_stats(tier, unit_type, attacks, damage, casualty_die):
    unit = units.create_unit("Test", unit_type, tier)
    assert unit.stats.attacks == attacks
    assert unit.stats.damage == damage
    assert unit.casualty_die.current == unit.casualty_die.max == casualty_die


def test_unknown_tier_falls_back_to_tier_one_base():
    assert units.calculate_attacks(9, UnitType.INFANTRY) == 1
    assert units.calculate_damage(9, UnitType.CAVALRY) == 2
    assert units.calculate_casualty_die(9, UnitType.INFANTRY) == 1


def test_create_unit_defaults_and_explicit_stats():
    unit = units.create_unit("Iron Guard", UnitType.INFANTRY, 2, attack=3, command=2)
    assert unit.name == "Iron Guard"
    assert unit.stats.attack == 3
    assert unit.stats.command == 2
    assert unit.stats.defense == 10
    assert unit.stats.morale == 10
    assert unit.traits == []
    assert unit.conditions == []
    assert unit.experience == 0
    assert unit.battles == 0
    assert unit.created == unit.updated


def test_create_unit_accepts_type_value():
    assert units.create_unit("Riders", "cavalry").type is UnitType.CAVALRY


def test_ids_are_unique():
    assert units.create_unit("A").id != units.create_unit("B").id


def test_take_casualties_breaks_unit_at_zero():
    unit = units.create_unit("Levy", UnitType.INFANTRY, 3)
    hurt = units.take_casualties(unit, 2)
    assert hurt.casualty_die.current == 1
    assert not units.is_broken(hurt)

    routed = units.take_casualties(hurt, 5)
    assert routed.casualty_die.current == 0
    assert routed.conditions == [UnitCondition.BROKEN.value]


def test_rally_clears_broken_and_respects_maximum():
    unit = units.take_casualties(units.create_unit("Levy", UnitType.INFANTRY, 3), 3)
    assert units.is_broken(unit)

    rallied = units.rally_casualties(unit, 10)
    assert rallied.casualty_die.current == 3
    assert not units.is_broken(rallied)


def test_rally_zero_keeps_broken_unit_broken():
    unit = units.take_casualties(units.create_unit("Levy"), 1)
    assert units.is_broken(units.rally_casualties(unit, 0))


def test_transitions_do_not_mutate_input():
    unit = units.create_unit("Levy", UnitType.INFANTRY, 3)
    units.take_casualties(unit, 3)
    units.add_condition(unit, "exposed")
    units.add_trait(unit, "Stalwart")
    units.add_experience(unit, 2)
    assert unit.casualty_die.current == 3
    assert unit.conditions == []
    assert unit.traits == []
    assert unit.experience == 0


def test_copies_share_no_nested_state():
    unit = units.create_unit("Levy")
    updated = units.add_trait(unit, "Stalwart")
    updated.stats.attack = 7
    assert unit.stats.attack == 0


def test_traits_and_conditions_are_idempotent():
    unit = units.create_unit("Levy")
    once = units.add_trait(unit, "Stalwart")
    assert units.add_trait(once, "Stalwart") is once
    assert once.traits == ["Stalwart"]

    exposed = units.add_condition(unit, "exposed")
    assert units.add_condition(exposed, "exposed").conditions == ["exposed"]
    assert units.remove_condition(exposed, "exposed").conditions == []
    assert units.remove_trait(once, "missing").traits == ["Stalwart"]


def test_experience_and_battles_accumulate():
    unit = units.add_experience(units.add_experience(units.create_unit("Levy"), 2), 3)
    assert unit.experience == 5
    assert units.add_battle(units.add_battle(unit)).battles == 2


@given(
    tier=st.integers(min_value=1, max_value=5),
    unit_type=st.sampled_from(list(UnitType)),
    hits=st.lists(st.integers(min_value=0, max_value=6), max_size=8),
)
def test_casualty_die_stays_in_bounds(tier, unit_type, hits):
    unit = units.create_unit("Prop", unit_type, tier)
    for hit in hits:
        before = unit.casualty_die.current
        unit = units.take_casualties(unit, hit)
        assert 0 <= unit.casualty_die.current <= before
        assert units.is_broken(unit) == (unit.casualty_die.current == 0)
    unit = units.rally_casualties(unit, 100)
    assert unit.casualty_die.current == unit.casualty_die.max


@given(
    tier=st.integers(min_value=1, max_value=5),
    unit_type=st.sampled_from(list(UnitType)),
    wound=st.integers(min_value=0, max_value=5),
    data=st.data(),
)
def test_rally_undoes_casualties(tier, unit_type, wound, data):
    unit = units.take_casualties(units.create_unit("Prop", unit_type, tier), wound)
    n = data.draw(st.integers(min_value=0, max_value=unit.casualty_die.current))
    restored = units.rally_casualties(units.take_casualties(unit, n), n)
    assert restored.casualty_die.current == min(unit.casualty_die.current, unit.casualty_die.max)
    assert units.is_broken(restored) == units.is_broken(unit)


@given(
    tier=st.integers(min_value=1, max_value=5),
    unit_type=st.sampled_from(list(UnitType)),
    n=st.integers(min_value=0, max_value=20),
)
def test_rally_after_overkill_restores_fresh_unit(tier, unit_type, n):
    unit = units.create_unit("Prop", unit_type, tier)
    restored = units.rally_casualties(units.take_casualties(unit, n), n)
    assert restored.casualty_die.current == min(unit.casualty_die.current, unit.casualty_die.max)
