"""Intrigue actions.

Actions are plain tagged records: each carries a ``type`` discriminator and
the fields that action needs for the turn record, the log and formatting.
They hold no behaviour; resolving a skill test (see
:mod:`kingdoms.services.intrigue_service`) produces a copy with ``result``
filled in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from kingdoms.utils.dice import CheckResult


@dataclass(frozen=True, slots=True)
class SkillTestAction:
    skill: str
    target: str | None = None
    difficulty: int | None = None
    description: str = ""
    result: CheckResult | None = None
    type: Literal["skill_test"] = "skill_test"


@dataclass(frozen=True, slots=True)
class DefenseModificationAction:
    defense: str
    target: str
    change: int
    description: str = ""
    type: Literal["defense_modification"] = "defense_modification"


@dataclass(frozen=True, slots=True)
class ResourceTransferAction:
    source: str
    target: str
    amount: int
    description: str = ""
    type: Literal["resource_transfer"] = "resource_transfer"


@dataclass(frozen=True, slots=True)
class UnitCreationAction:
    unit_type: str
    unit_tier: int
    cost: int
    description: str = ""
    type: Literal["unit_creation"] = "unit_creation"


@dataclass(frozen=True, slots=True)
class UnitModificationAction:
    unit_id: str
    modifications: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    type: Literal["unit_modification"] = "unit_modification"


@dataclass(frozen=True, slots=True)
class SpecialAction:
    name: str
    description: str = ""
    type: Literal["special"] = "special"


IntrigueAction = (
    SkillTestAction
    | DefenseModificationAction
    | ResourceTransferAction
    | UnitCreationAction
    | UnitModificationAction
    | SpecialAction
)


def create_skill_test_action(
    skill: str,
    *,
    target: str | None = None,
    difficulty: int | None = None,
    description: str = "",
) -> SkillTestAction:
    return SkillTestAction(
        skill=skill, target=target, difficulty=difficulty, description=description
    )


def create_defense_modification_action(
    defense: str, target: str, change: int, *, description: str = ""
) -> DefenseModificationAction:
    return DefenseModificationAction(
        defense=defense, target=target, change=change, description=description
    )


def create_resource_transfer_action(
    source: str, target: str, amount: int, *, description: str = ""
) -> ResourceTransferAction:
    return ResourceTransferAction(
        source=source, target=target, amount=amount, description=description
    )


def create_unit_creation_action(
    unit_type: str, unit_tier: int, cost: int, *, description: str = ""
) -> UnitCreationAction:
    return UnitCreationAction(
        unit_type=unit_type, unit_tier=unit_tier, cost=cost, description=description
    )


def create_unit_modification_action(
    unit_id: str, modifications: dict[str, Any], *, description: str = ""
) -> UnitModificationAction:
    return UnitModificationAction(
        unit_id=unit_id, modifications=dict(modifications), description=description
    )


def create_special_action(name: str, *, description: str = "") -> SpecialAction:
    return SpecialAction(name=name, description=description)
