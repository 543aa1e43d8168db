"""Enumerations shared by the warfare and intrigue rules."""

from __future__ import annotations

from enum import StrEnum


class UnitType(StrEnum):
    """Military formation categories."""

    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    ARTILLERY = "artillery"
    AERIAL = "aerial"


class UnitCondition(StrEnum):
    """Conditions a unit can suffer during warfare."""

    BROKEN = "broken"
    DISBANDED = "disbanded"
    DISORGANIZED = "disorganized"
    DISORIENTED = "disoriented"
    EXPOSED = "exposed"
    HIDDEN = "hidden"
    MISLED = "misled"
    WEAKENED = "weakened"


class DomainSkill(StrEnum):
    """Skills a domain rolls in intrigue."""

    DIPLOMACY = "diplomacy"
    ESPIONAGE = "espionage"
    LORE = "lore"
    OPERATIONS = "operations"


class DomainDefense(StrEnum):
    """Defenses protecting a domain."""

    COMMUNICATIONS = "communications"
    RESOLVE = "resolve"
    RESOURCES = "resources"


class BattlePhase(StrEnum):
    """Battle lifecycle.

    ``DEPLOYMENT`` is part of the vocabulary but no transition enters it;
    :func:`kingdoms.domain.battle.start_battle` moves straight from setup.
    """

    SETUP = "setup"
    DEPLOYMENT = "deployment"
    BATTLE = "battle"
    AFTERMATH = "aftermath"


class BattleRank(StrEnum):
    """Rows of the battlefield plus the two unstructured pools."""

    VANGUARD = "vanguard"
    CENTER = "center"
    REAR = "rear"
    RESERVE = "reserve"
    NOT_DEPLOYED = "not_deployed"

    @property
    def is_pool(self) -> bool:
        """Reserve and not-deployed hold any number of units and have no columns."""

        return self in (BattleRank.RESERVE, BattleRank.NOT_DEPLOYED)


class GridColumn(StrEnum):
    """Columns of the structured ranks."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class IntriguePhase(StrEnum):
    """Intrigue session lifecycle."""

    SETUP = "setup"
    ACTIVE = "active"
    RESOLUTION = "resolution"


class LogEventType(StrEnum):
    """Event types written by the engines themselves."""

    BATTLE_START = "battle_start"
    BATTLE_END = "battle_end"
    UNIT_ACTIVATED = "unit_activated"
    ROUND_END = "round_end"
    ROUND_START = "round_start"
    INTRIGUE_START = "intrigue_start"
    INTRIGUE_END = "intrigue_end"
    TURN_TAKEN = "turn_taken"


class Outcome(StrEnum):
    """Result of attempting a battle or intrigue transition."""

    APPLIED = "applied"
    DOMAIN_ENROLLED = "domain_enrolled"
    REJECTED_INVALID_PHASE = "rejected_invalid_phase"
    REJECTED_UNKNOWN_ID = "rejected_unknown_id"
    REJECTED_DUPLICATE = "rejected_duplicate"
    REJECTED_INVALID_POSITION = "rejected_invalid_position"
    REJECTED_OCCUPIED = "rejected_occupied"
    REJECTED_NOT_YOUR_TURN = "rejected_not_your_turn"
    REJECTED_EMPTY_INITIATIVE = "rejected_empty_initiative"
    REJECTED_NO_INITIATOR = "rejected_no_initiator"
    REJECTED_TOO_FEW_DOMAINS = "rejected_too_few_domains"

    @property
    def changed(self) -> bool:
        """Whether the transition produced a new state."""

        return self in (Outcome.APPLIED, Outcome.DOMAIN_ENROLLED)
