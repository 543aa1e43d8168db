"""Domain rules: skills, derived defenses, resources and membership."""

from __future__ import annotations

import copy
from dataclasses import asdict, replace
from typing import NamedTuple

from kingdoms.domain.models import (
    DefenseLevels,
    DefenseScores,
    Domain,
    DomainID,
    DomainSkills,
    OfficerID,
    UnitID,
    new_id,
    utc_now,
)
from kingdoms.utils.dice import proficiency_bonus

BASE_ACTIONS = 4
BASE_DEFENSE = 10


class DomainSize(NamedTuple):
    name: str
    die: str


DOMAIN_SIZES: dict[int, DomainSize] = {
    1: DomainSize("Small", "d4"),
    2: DomainSize("Medium", "d6"),
    3: DomainSize("Large", "d8"),
    4: DomainSize("Huge", "d10"),
    5: DomainSize("Massive", "d12"),
}


def calculate_defense_scores(skills: DomainSkills) -> DefenseScores:
    """Each defense is 10 plus the floored average of its two related skills."""

    return DefenseScores(
        communications=BASE_DEFENSE + (skills.diplomacy + skills.espionage) // 2,
        resolve=BASE_DEFENSE + (skills.diplomacy + skills.lore) // 2,
        resources=BASE_DEFENSE + (skills.operations + skills.lore) // 2,
    )


def create_domain(
    name: str,
    size: int = 1,
    skills: DomainSkills | None = None,
) -> Domain:
    skills = DomainSkills(**asdict(skills)) if skills is not None else DomainSkills()
    now = utc_now()
    return Domain(
        id=DomainID(new_id()),
        name=name,
        size=size,
        skills=skills,
        defense_scores=calculate_defense_scores(skills),
        defense_levels=DefenseLevels(),
        created=now,
        updated=now,
    )


def _evolve(domain: Domain, **changes: object) -> Domain:
    return replace(copy.deepcopy(domain), **changes)


def update_skills(domain: Domain, **skills: int) -> Domain:
    """Merge skill changes and recompute every defense score from the result.

    Raises:
        TypeError: If a keyword is not one of the four domain skills.
    """

    merged = replace(domain.skills, **skills)
    return _evolve(
        domain,
        skills=merged,
        defense_scores=calculate_defense_scores(merged),
        updated=utc_now(),
    )


def update_defense_levels(domain: Domain, **levels: int) -> Domain:
    return _evolve(
        domain, defense_levels=replace(domain.defense_levels, **levels), updated=utc_now()
    )


def add_resources(domain: Domain, amount: int) -> Domain:
    return _evolve(domain, resources=max(0, domain.resources + amount), updated=utc_now())


def remove_resources(domain: Domain, amount: int) -> Domain:
    """Spend resources; overspending leaves the domain at exactly zero."""

    return _evolve(domain, resources=max(0, domain.resources - amount), updated=utc_now())


def add_unit(domain: Domain, unit_id: UnitID) -> Domain:
    if unit_id in domain.units:
        return domain
    return _evolve(domain, units=[*domain.units, unit_id], updated=utc_now())


def remove_unit(domain: Domain, unit_id: UnitID) -> Domain:
    return _evolve(
        domain, units=[uid for uid in domain.units if uid != unit_id], updated=utc_now()
    )


def add_officer(domain: Domain, officer_id: OfficerID) -> Domain:
    if officer_id in domain.officers:
        return domain
    return _evolve(domain, officers=[*domain.officers, officer_id], updated=utc_now())


def remove_officer(domain: Domain, officer_id: OfficerID) -> Domain:
    return _evolve(
        domain,
        officers=[oid for oid in domain.officers if oid != officer_id],
        updated=utc_now(),
    )


def calculate_actions(domain: Domain) -> int:
    """Intrigue actions available per session: 4 + size."""

    return BASE_ACTIONS + domain.size


def calculate_proficiency_bonus(domain: Domain) -> int:
    return proficiency_bonus(domain.size)


def domain_die(domain: Domain) -> str:
    """Die type granted by the domain's size (d4 for Small up to d12 for Massive)."""

    size = DOMAIN_SIZES.get(domain.size)
    return size.die if size else DOMAIN_SIZES[1].die


def skill_modifier(domain: Domain, skill: str) -> int:
    """Look up a skill modifier by name.

    Raises:
        KeyError: If ``skill`` is not a domain skill.
    """

    skills = asdict(domain.skills)
    if skill not in skills:
        raise KeyError(skill)
    return skills[skill]
