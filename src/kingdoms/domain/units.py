"""Unit rules: creation, derived statistics and attrition."""

from __future__ import annotations

import copy
from dataclasses import replace

from kingdoms.domain.enums import UnitCondition, UnitType
from kingdoms.domain.models import CasualtyDie, Unit, UnitID, UnitStats, new_id, utc_now

TIER_NUMERALS = {1: "I", 2: "II", 3: "III", 4: "IV", 5: "V"}

BASE_ATTACKS = {1: 1, 2: 1, 3: 2, 4: 2, 5: 3}
BASE_DAMAGE = {1: 1, 2: 1, 3: 2, 4: 2, 5: 3}
BASE_CASUALTY_DIE = {1: 1, 2: 2, 3: 3, 4: 4, 5: 5}

ATTACK_MODIFIERS = {UnitType.ARTILLERY: -1}
DAMAGE_MODIFIERS = {UnitType.CAVALRY: 1, UnitType.ARTILLERY: 1}
CASUALTY_DIE_MODIFIERS = {UnitType.ARTILLERY: -1, UnitType.AERIAL: -1}


def calculate_attacks(tier: int, unit_type: UnitType) -> int:
    """Number of attacks; never below one."""

    attacks = BASE_ATTACKS.get(tier, 1) + ATTACK_MODIFIERS.get(unit_type, 0)
    return max(1, attacks)


def calculate_damage(tier: int, unit_type: UnitType) -> int:
    return BASE_DAMAGE.get(tier, 1) + DAMAGE_MODIFIERS.get(unit_type, 0)


def calculate_casualty_die(tier: int, unit_type: UnitType) -> int:
    """Size of the casualty die; never below one."""

    size = BASE_CASUALTY_DIE.get(tier, 1) + CASUALTY_DIE_MODIFIERS.get(unit_type, 0)
    return max(1, size)


def create_unit(
    name: str,
    unit_type: UnitType = UnitType.INFANTRY,
    tier: int = 1,
    *,
    attack: int = 0,
    power: int = 0,
    defense: int = 10,
    toughness: int = 10,
    morale: int = 10,
    command: int = 0,
) -> Unit:
    """Create a unit at full strength with stats derived from type and tier."""

    unit_type = UnitType(unit_type)
    casualty_max = calculate_casualty_die(tier, unit_type)
    now = utc_now()
    return Unit(
        id=UnitID(new_id()),
        name=name,
        type=unit_type,
        tier=tier,
        stats=UnitStats(
            attack=attack,
            power=power,
            defense=defense,
            toughness=toughness,
            morale=morale,
            command=command,
            attacks=calculate_attacks(tier, unit_type),
            damage=calculate_damage(tier, unit_type),
        ),
        casualty_die=CasualtyDie(current=casualty_max, max=casualty_max),
        created=now,
        updated=now,
    )


def is_broken(unit: Unit) -> bool:
    return UnitCondition.BROKEN in unit.conditions


def _with_tag(tags: list[str], tag: str) -> list[str]:
    return tags if tag in tags else [*tags, tag]


def _without_tag(tags: list[str], tag: str) -> list[str]:
    return [existing for existing in tags if existing != tag]


def _evolve(unit: Unit, **changes: object) -> Unit:
    """Copy ``unit`` without sharing nested stats or lists, then apply ``changes``."""

    return replace(copy.deepcopy(unit), **changes)


def add_trait(unit: Unit, trait: str) -> Unit:
    if trait in unit.traits:
        return unit
    return _evolve(unit, traits=_with_tag(unit.traits, trait), updated=utc_now())


def remove_trait(unit: Unit, trait: str) -> Unit:
    return _evolve(unit, traits=_without_tag(unit.traits, trait), updated=utc_now())


def add_condition(unit: Unit, condition: str) -> Unit:
    if condition in unit.conditions:
        return unit
    return _evolve(unit, conditions=_with_tag(unit.conditions, condition), updated=utc_now())


def remove_condition(unit: Unit, condition: str) -> Unit:
    return _evolve(unit, conditions=_without_tag(unit.conditions, condition), updated=utc_now())


def take_casualties(unit: Unit, casualties: int) -> Unit:
    """Reduce the casualty die, breaking the unit when it reaches zero."""

    current = max(0, unit.casualty_die.current - casualties)
    conditions = list(unit.conditions)
    if current == 0:
        conditions = _with_tag(conditions, UnitCondition.BROKEN.value)
    return _evolve(
        unit,
        casualty_die=CasualtyDie(current=current, max=unit.casualty_die.max),
        conditions=conditions,
        updated=utc_now(),
    )


def rally_casualties(unit: Unit, casualties: int) -> Unit:
    """Recover casualties up to the die maximum; a unit above zero is no longer broken."""

    current = min(unit.casualty_die.max, unit.casualty_die.current + casualties)
    conditions = list(unit.conditions)
    if current > 0:
        conditions = _without_tag(conditions, UnitCondition.BROKEN.value)
    return _evolve(
        unit,
        casualty_die=CasualtyDie(current=current, max=unit.casualty_die.max),
        conditions=conditions,
        updated=utc_now(),
    )


def add_experience(unit: Unit, experience: int) -> Unit:
    return _evolve(unit, experience=unit.experience + experience, updated=utc_now())


def add_battle(unit: Unit) -> Unit:
    """Record one more battle fought by the unit."""

    return _evolve(unit, battles=unit.battles + 1, updated=utc_now())
