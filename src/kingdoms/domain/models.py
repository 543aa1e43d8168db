"""Dataclasses describing every Kingdoms & Warfare entity.

The rules layer only ever sees these values.  Persistence adapters turn
them into JSON through a pydantic ``TypeAdapter`` (see
:mod:`kingdoms.repository.entities`), so every field must stay
JSON-representable.

Transition functions never mutate the value they are given; they return a
new one with a refreshed ``updated`` timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, NewType, TypeVar
from uuid import uuid4

from .actions import IntrigueAction
from .enums import (
    BattlePhase,
    BattleRank,
    GridColumn,
    IntriguePhase,
    Outcome,
    UnitType,
)

# --- Strongly typed identifiers -------------------------------------------------

UnitID = NewType("UnitID", str)
DomainID = NewType("DomainID", str)
BattleID = NewType("BattleID", str)
IntrigueID = NewType("IntrigueID", str)
OfficerID = NewType("OfficerID", str)


def utc_now() -> datetime:
    """Current time in UTC with timezone info."""

    return datetime.now(UTC)


def new_id() -> str:
    return uuid4().hex


# --- Units ----------------------------------------------------------------------


@dataclass(slots=True)
class UnitStats:
    """Combat statistics; ``attacks`` and ``damage`` derive from type and tier."""

    attack: int = 0
    power: int = 0
    defense: int = 10
    toughness: int = 10
    morale: int = 10
    command: int = 0
    attacks: int = 1
    damage: int = 1


@dataclass(slots=True)
class CasualtyDie:
    """Remaining strength of a unit (0 <= current <= max)."""

    current: int
    max: int


@dataclass(slots=True)
class Unit:
    """Military formation owned by a domain."""

    id: UnitID
    name: str
    type: UnitType
    tier: int
    stats: UnitStats
    casualty_die: CasualtyDie
    traits: list[str] = field(default_factory=list)
    conditions: list[str] = field(default_factory=list)
    experience: int = 0
    battles: int = 0
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)


# --- Domains --------------------------------------------------------------------


@dataclass(slots=True)
class DomainSkills:
    diplomacy: int = 0
    espionage: int = 0
    lore: int = 0
    operations: int = 0


@dataclass(slots=True)
class DefenseScores:
    """Derived from skills; never edited directly."""

    communications: int = 10
    resolve: int = 10
    resources: int = 10


@dataclass(slots=True)
class DefenseLevels:
    communications: int = 0
    resolve: int = 0
    resources: int = 0


@dataclass(slots=True)
class Domain:
    """Political entity taking part in intrigue and owning units."""

    id: DomainID
    name: str
    size: int
    skills: DomainSkills
    defense_scores: DefenseScores
    defense_levels: DefenseLevels = field(default_factory=DefenseLevels)
    resources: int = 0
    units: list[UnitID] = field(default_factory=list)
    officers: list[OfficerID] = field(default_factory=list)
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)


# --- Shared ---------------------------------------------------------------------


@dataclass(slots=True)
class LogEntry:
    """Timestamped event appended to a battle or intrigue log."""

    type: str
    timestamp: datetime = field(default_factory=utc_now)
    details: dict[str, Any] = field(default_factory=dict)


# --- Battles --------------------------------------------------------------------


def _empty_rank() -> dict[GridColumn, UnitID | None]:
    return {column: None for column in GridColumn}


@dataclass(slots=True)
class GridPosition:
    rank: BattleRank = BattleRank.NOT_DEPLOYED
    column: GridColumn | None = None


@dataclass(slots=True)
class BattleUnit:
    """A unit's participation record inside one battle."""

    id: UnitID
    domain_id: DomainID
    position: GridPosition = field(default_factory=GridPosition)
    activated: bool = False
    used_reaction: bool = False
    tokens: list[str] = field(default_factory=list)


@dataclass(slots=True)
class BattleGrid:
    """Three ranks of three single-occupancy cells plus two unbounded pools."""

    vanguard: dict[GridColumn, UnitID | None] = field(default_factory=_empty_rank)
    center: dict[GridColumn, UnitID | None] = field(default_factory=_empty_rank)
    rear: dict[GridColumn, UnitID | None] = field(default_factory=_empty_rank)
    reserve: list[UnitID] = field(default_factory=list)
    not_deployed: list[UnitID] = field(default_factory=list)

    def rank(self, rank: BattleRank) -> dict[GridColumn, UnitID | None]:
        """Return the cells of a structured rank."""

        if rank.is_pool:
            raise ValueError(f"{rank} is not a structured rank")
        return getattr(self, rank.value)

    def pool(self, rank: BattleRank) -> list[UnitID]:
        """Return the list backing ``reserve`` or ``not_deployed``."""

        if not rank.is_pool:
            raise ValueError(f"{rank} is not a pool")
        return getattr(self, rank.value)


@dataclass(slots=True)
class Battle:
    """Warfare battle between domains."""

    id: BattleID
    name: str
    phase: BattlePhase = BattlePhase.SETUP
    round: int = 0
    domains: list[DomainID] = field(default_factory=list)
    units: dict[UnitID, BattleUnit] = field(default_factory=dict)
    grid: BattleGrid = field(default_factory=BattleGrid)
    initiative: list[UnitID] = field(default_factory=list)
    current_turn: int = 0
    log: list[LogEntry] = field(default_factory=list)
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)


# --- Intrigue -------------------------------------------------------------------


@dataclass(slots=True)
class IntrigueTurn:
    domain_id: DomainID
    action: IntrigueAction
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class Intrigue:
    """Turn-based political contest between domains."""

    id: IntrigueID
    name: str
    phase: IntriguePhase = IntriguePhase.SETUP
    domains: list[DomainID] = field(default_factory=list)
    initiator: DomainID | None = None
    turn_order: list[DomainID] = field(default_factory=list)
    current_domain_index: int = 0
    turns: list[IntrigueTurn] = field(default_factory=list)
    log: list[LogEntry] = field(default_factory=list)
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)


# --- Transition results ---------------------------------------------------------

StateT = TypeVar("StateT")


@dataclass(frozen=True, slots=True)
class Transition(Generic[StateT]):
    """State produced by a transition and how the request was handled.

    Rejected transitions carry the unchanged input state, so callers can
    always continue with ``transition.state``.
    """

    state: StateT
    outcome: Outcome = Outcome.APPLIED

    @property
    def applied(self) -> bool:
        return self.outcome is Outcome.APPLIED

    @property
    def changed(self) -> bool:
        return self.outcome.changed
