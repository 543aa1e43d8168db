"""Plain-text rendering of entities and roll results for the CLI."""

from __future__ import annotations

from collections.abc import Mapping

from kingdoms.domain.actions import (
    DefenseModificationAction,
    IntrigueAction,
    ResourceTransferAction,
    SkillTestAction,
    SpecialAction,
    UnitCreationAction,
    UnitModificationAction,
)
from kingdoms.domain.domains import DOMAIN_SIZES
from kingdoms.domain.enums import (
    BattlePhase,
    DomainDefense,
    DomainSkill,
    GridColumn,
    IntriguePhase,
)
from kingdoms.domain.models import Battle, Domain, DomainID, Intrigue, Unit, UnitID
from kingdoms.domain.units import TIER_NUMERALS
from kingdoms.utils.dice import CheckResult, DamageResult, NotationRoll

RECENT_TURNS = 5
CURRENT_MARKER = "→ "
EMPTY_CELL = "Empty"


def _label(value: str) -> str:
    return value.replace("_", " ").title()


def _signed(value: int) -> str:
    return f"{value:+d}"


def format_unit(unit: Unit) -> str:
    tier = TIER_NUMERALS.get(unit.tier, f"Tier {unit.tier}")
    stats = unit.stats
    lines = [
        f"{unit.name} ({_label(unit.type)} {tier})",
        f"Casualty Die: {unit.casualty_die.current}/{unit.casualty_die.max}",
        f"Attack: {_signed(stats.attack)} ({stats.attacks} attacks, {stats.damage} damage)",
        f"Power: {_signed(stats.power)}",
        f"Defense: {stats.defense}",
        f"Toughness: {stats.toughness}",
        f"Morale: {stats.morale}",
        f"Command: {_signed(stats.command)}",
    ]
    if unit.conditions:
        lines.append("Conditions: " + ", ".join(_label(c) for c in unit.conditions))
    if unit.traits:
        lines.append("Traits: " + ", ".join(unit.traits))
    if unit.battles:
        lines.append(f"Battles: {unit.battles}")
    if unit.experience:
        lines.append(f"Experience: {unit.experience}")
    return "\n".join(lines)


def format_domain(domain: Domain) -> str:
    size = DOMAIN_SIZES.get(domain.size)
    size_label = f"{size.name}, {size.die}" if size else f"Size {domain.size}"
    skills, scores, levels = domain.skills, domain.defense_scores, domain.defense_levels
    lines = [f"{domain.name} ({size_label})"]
    lines += [f"{_label(skill)}: {_signed(getattr(skills, skill))}" for skill in DomainSkill]
    lines.append("")
    lines += [
        f"{_label(defense)}: {getattr(scores, defense)} (Level {getattr(levels, defense)})"
        for defense in DomainDefense
    ]
    lines += [
        "",
        f"Resource Points: {domain.resources}",
        f"Units: {len(domain.units)}",
        f"Officers: {len(domain.officers)}",
    ]
    return "\n".join(lines)


def _names(ids: list[UnitID], units: Mapping[UnitID, Unit]) -> str:
    if not ids:
        return "None"
    return ", ".join(units[uid].name if uid in units else uid for uid in ids)


def _rank_row(cells: Mapping[GridColumn, UnitID | None], units: Mapping[UnitID, Unit]) -> str:
    rendered = []
    for column in GridColumn:
        uid = cells.get(column)
        if uid is None:
            rendered.append(f"[{EMPTY_CELL}]")
        else:
            rendered.append(f"[{units[uid].name if uid in units else uid}]")
    return " ".join(rendered)


def format_battle(
    battle: Battle,
    domains: Mapping[DomainID, Domain] | None = None,
    units: Mapping[UnitID, Unit] | None = None,
) -> str:
    """Render a battle; the grid appears once setup is over, initiative while fighting."""

    domains = domains or {}
    units = units or {}
    lines = [f"{battle.name} ({_label(battle.phase)})", f"Round: {battle.round}", "", "Domains:"]
    lines.extend(
        f"- {domains[did].name if did in domains else did}" for did in battle.domains
    )

    if battle.phase is not BattlePhase.SETUP:
        grid = battle.grid
        lines += [
            "",
            "Battlefield:",
            f"Vanguard: {_rank_row(grid.vanguard, units)}",
            f"Center: {_rank_row(grid.center, units)}",
            f"Rear: {_rank_row(grid.rear, units)}",
            f"Reserve: {_names(grid.reserve, units)}",
            f"Not Deployed: {_names(grid.not_deployed, units)}",
        ]

    if battle.phase is BattlePhase.BATTLE and battle.initiative:
        lines += ["", "Initiative Order:"]
        for index, uid in enumerate(battle.initiative):
            marker = CURRENT_MARKER if index == battle.current_turn else ""
            name = units[uid].name if uid in units else uid
            lines.append(f"{marker}{index + 1}. {name}")
    return "\n".join(lines)


def format_intrigue_action(action: IntrigueAction) -> str:
    label = _label(action.type)
    if isinstance(action, SkillTestAction):
        text = f"{label}: {action.skill} test"
        if action.target:
            text += f" against {action.target}"
        if action.difficulty:
            text += f" (DC {action.difficulty})"
        if action.result is not None:
            text += " - Success" if action.result.success else " - Failure"
        return text
    if isinstance(action, DefenseModificationAction):
        return f"{label}: {action.defense} {_signed(action.change)} to {action.target}"
    if isinstance(action, ResourceTransferAction):
        return f"{label}: {action.amount} resources from {action.source} to {action.target}"
    if isinstance(action, UnitCreationAction):
        return f"{label}: {action.unit_type} (Tier {action.unit_tier}) for {action.cost} resources"
    if isinstance(action, UnitModificationAction):
        return f"{label}: Modified {action.unit_id}"
    if isinstance(action, SpecialAction):
        return f"{label}: {action.name}"
    return label


def format_intrigue(intrigue: Intrigue, domains: Mapping[DomainID, Domain] | None = None) -> str:
    """Render an intrigue session with its turn order and the last few turns."""

    domains = domains or {}

    def name(did: DomainID) -> str:
        return domains[did].name if did in domains else did

    lines = [f"{intrigue.name} ({_label(intrigue.phase)})", "", "Domains:"]
    for did in intrigue.domains:
        tag = " (Initiator)" if did == intrigue.initiator else ""
        lines.append(f"- {name(did)}{tag}")

    if intrigue.phase is IntriguePhase.ACTIVE and intrigue.turn_order:
        lines += ["", "Turn Order:"]
        for index, did in enumerate(intrigue.turn_order):
            marker = CURRENT_MARKER if index == intrigue.current_domain_index else ""
            lines.append(f"{marker}{index + 1}. {name(did)}")

    if intrigue.turns:
        lines += ["", "Recent Turns:"]
        lines.extend(
            f"- {name(turn.domain_id)}: {format_intrigue_action(turn.action)}"
            for turn in intrigue.turns[-RECENT_TURNS:]
        )
    return "\n".join(lines)


def format_roll(result: NotationRoll | CheckResult | DamageResult) -> str:
    """Render a notation roll, a d20 check or a damage roll."""

    if isinstance(result, NotationRoll):
        lines = [f"Roll: {result.notation}", f"Dice: {result.rolls}"]
        if result.modifier:
            lines.append(f"Modifier: {_signed(result.modifier)}")
        lines.append(f"Result: {result.result}")
        return "\n".join(lines)

    if isinstance(result, CheckResult):
        roll = f"Roll: {result.die_roll}"
        if len(result.all_rolls) > 1:
            roll += f" {result.all_rolls}"
        lines = [roll]
        if result.bonus:
            lines.append(f"Bonus: {_signed(result.bonus)}")
        lines += [
            f"Total: {result.total}",
            f"DC: {result.difficulty}",
            f"Result: {'Success' if result.success else 'Failure'}",
        ]
        return "\n".join(lines)

    lines = [f"Dice: {result.rolls}", f"Sum: {result.subtotal}"]
    if result.power_bonus:
        lines.append(f"Power Bonus: {_signed(result.power_bonus)}")
    lines.append(f"Total Damage: {result.total}")
    return "\n".join(lines)
