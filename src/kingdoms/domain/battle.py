"""Warfare battle engine.

A battle moves ``setup -> battle -> aftermath``.  Units join through
:func:`add_unit`, wait in the not-deployed pool, and are placed on the 3x3
grid (or in the reserve) with :func:`deploy_unit`.  Once started, units act
in initiative order; :func:`end_turn` advances the pointer and closes a
round when it wraps around.

Every transition returns a :class:`~kingdoms.domain.models.Transition`.
Invalid requests never raise: they come back with a ``REJECTED_*`` outcome
and the battle they were given, untouched.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from kingdoms.domain.enums import BattlePhase, BattleRank, GridColumn, LogEventType, Outcome
from kingdoms.domain.models import (
    Battle,
    BattleGrid,
    BattleID,
    BattleUnit,
    DomainID,
    GridPosition,
    LogEntry,
    Transition,
    UnitID,
    new_id,
    utc_now,
)

STRUCTURED_RANKS = (BattleRank.VANGUARD, BattleRank.CENTER, BattleRank.REAR)


def create_battle(name: str) -> Battle:
    """Create an empty battle in the setup phase."""

    now = utc_now()
    return Battle(id=BattleID(new_id()), name=name, created=now, updated=now)


def _working_copy(battle: Battle) -> Battle:
    """Deep copy ``battle`` so nested grid and unit records can be edited freely."""

    return replace(copy.deepcopy(battle), updated=utc_now())


def _result(battle: Battle, outcome: Outcome = Outcome.APPLIED) -> Transition[Battle]:
    return Transition(state=battle, outcome=outcome)


def _append_log(battle: Battle, event_type: str, **details: Any) -> None:
    battle.log.append(LogEntry(type=event_type, timestamp=utc_now(), details=details))


# --- Grid helpers (operate on working copies only) ------------------------------


def _vacate(grid: BattleGrid, unit_id: UnitID, position: GridPosition) -> None:
    if position.rank.is_pool:
        pool = grid.pool(position.rank)
        pool[:] = [uid for uid in pool if uid != unit_id]
    elif position.column is not None:
        cells = grid.rank(position.rank)
        if cells.get(position.column) == unit_id:
            cells[position.column] = None


def _occupy(grid: BattleGrid, unit_id: UnitID, position: GridPosition) -> None:
    if position.rank.is_pool:
        grid.pool(position.rank).append(unit_id)
    elif position.column is not None:
        grid.rank(position.rank)[position.column] = unit_id


def _drop_unit(battle: Battle, unit_id: UnitID) -> None:
    """Remove every trace of ``unit_id``; if it was acting, the next unit takes the turn."""

    record = battle.units.pop(unit_id)
    _vacate(battle.grid, unit_id, record.position)
    earlier = battle.initiative[: battle.current_turn].count(unit_id)
    battle.initiative = [uid for uid in battle.initiative if uid != unit_id]
    if battle.initiative:
        battle.current_turn = (battle.current_turn - earlier) % len(battle.initiative)
    else:
        battle.current_turn = 0


# --- Membership -----------------------------------------------------------------


def add_domain(battle: Battle, domain_id: DomainID) -> Transition[Battle]:
    if domain_id in battle.domains:
        return _result(battle, Outcome.REJECTED_DUPLICATE)
    updated = _working_copy(battle)
    updated.domains.append(domain_id)
    return _result(updated)


def remove_domain(battle: Battle, domain_id: DomainID) -> Transition[Battle]:
    """Remove a domain together with every unit it brought to the battle."""

    if domain_id not in battle.domains:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(battle)
    updated.domains = [did for did in updated.domains if did != domain_id]
    for unit_id in [uid for uid, record in updated.units.items() if record.domain_id == domain_id]:
        _drop_unit(updated, unit_id)
    return _result(updated)


def add_unit(battle: Battle, unit_id: UnitID, domain_id: DomainID) -> Transition[Battle]:
    """Add a unit to the not-deployed pool.

    When ``domain_id`` has not joined the battle yet, only the domain is
    enrolled and the unit is *not* added; the outcome is
    ``DOMAIN_ENROLLED`` so the caller can repeat the request.
    """

    if unit_id in battle.units:
        return _result(battle, Outcome.REJECTED_DUPLICATE)
    if domain_id not in battle.domains:
        enrolled = add_domain(battle, domain_id).state
        return _result(enrolled, Outcome.DOMAIN_ENROLLED)

    updated = _working_copy(battle)
    updated.units[unit_id] = BattleUnit(id=unit_id, domain_id=domain_id)
    updated.grid.not_deployed.append(unit_id)
    return _result(updated)


def remove_unit(battle: Battle, unit_id: UnitID) -> Transition[Battle]:
    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(battle)
    _drop_unit(updated, unit_id)
    return _result(updated)


# --- Deployment -----------------------------------------------------------------


def _target_position(
    rank: BattleRank | str, column: GridColumn | str | None
) -> GridPosition | None:
    try:
        target_rank = BattleRank(rank)
    except ValueError:
        return None
    if target_rank.is_pool:
        return GridPosition(rank=target_rank, column=None)
    if column is None:
        return None
    try:
        return GridPosition(rank=target_rank, column=GridColumn(column))
    except ValueError:
        return None


def deploy_unit(
    battle: Battle,
    unit_id: UnitID,
    rank: BattleRank | str,
    column: GridColumn | str | None = None,
) -> Transition[Battle]:
    """Move a unit to a grid cell or to one of the pools.

    Structured ranks need a column and hold a single unit per cell; the
    reserve and not-deployed pools ignore ``column``.  The old slot is only
    vacated once the target is known to be free.
    """

    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    target = _target_position(rank, column)
    if target is None:
        return _result(battle, Outcome.REJECTED_INVALID_POSITION)
    if target.column is not None and battle.grid.rank(target.rank)[target.column] is not None:
        return _result(battle, Outcome.REJECTED_OCCUPIED)

    updated = _working_copy(battle)
    record = updated.units[unit_id]
    _vacate(updated.grid, unit_id, record.position)
    record.position = target
    _occupy(updated.grid, unit_id, target)
    return _result(updated)


def deployed_unit_ids(battle: Battle) -> list[UnitID]:
    """Units on the grid or in reserve, front rank first, left to right."""

    deployed: list[UnitID] = []
    for rank in STRUCTURED_RANKS:
        cells = battle.grid.rank(rank)
        deployed.extend(uid for column in GridColumn if (uid := cells[column]) is not None)
    deployed.extend(battle.grid.reserve)
    return deployed


def order_by_command(unit_ids: Iterable[UnitID], command: Mapping[UnitID, int]) -> list[UnitID]:
    """Sort units by command bonus, highest first; ties keep their given order."""

    return sorted(unit_ids, key=lambda uid: command.get(uid, 0), reverse=True)


def set_initiative(battle: Battle, unit_ids: Sequence[UnitID]) -> Transition[Battle]:
    """Replace the initiative order wholesale."""

    updated = _working_copy(battle)
    updated.initiative = list(unit_ids)
    return _result(updated)


# --- Lifecycle ------------------------------------------------------------------


def start_battle(battle: Battle) -> Transition[Battle]:
    if battle.phase is not BattlePhase.SETUP:
        return _result(battle, Outcome.REJECTED_INVALID_PHASE)
    updated = _working_copy(battle)
    updated.phase = BattlePhase.BATTLE
    updated.round = 1
    _append_log(updated, LogEventType.BATTLE_START.value, round=1)
    return _result(updated)


def end_battle(battle: Battle, winning_domain_id: DomainID | None = None) -> Transition[Battle]:
    """Move the battle into its aftermath, recording the winner if there is one."""

    if battle.phase is not BattlePhase.BATTLE:
        return _result(battle, Outcome.REJECTED_INVALID_PHASE)
    updated = _working_copy(battle)
    updated.phase = BattlePhase.AFTERMATH
    _append_log(updated, LogEventType.BATTLE_END.value, winning_domain_id=winning_domain_id)
    return _result(updated)


def current_unit(battle: Battle) -> UnitID | None:
    """Unit whose turn it is, if the initiative has one."""

    if 0 <= battle.current_turn < len(battle.initiative):
        return battle.initiative[battle.current_turn]
    return None


def activate_unit(battle: Battle, unit_id: UnitID) -> Transition[Battle]:
    if battle.phase is not BattlePhase.BATTLE:
        return _result(battle, Outcome.REJECTED_INVALID_PHASE)
    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    if current_unit(battle) != unit_id:
        return _result(battle, Outcome.REJECTED_NOT_YOUR_TURN)

    updated = _working_copy(battle)
    updated.units[unit_id].activated = True
    _append_log(updated, LogEventType.UNIT_ACTIVATED.value, unit_id=unit_id)
    return _result(updated)


def end_turn(battle: Battle) -> Transition[Battle]:
    """Pass the turn to the next unit in initiative.

    Wrapping back to the first unit finishes the round: the round counter
    goes up, every unit regains its reaction, and ``round_end`` followed by
    ``round_start`` are logged.
    """

    if battle.phase is not BattlePhase.BATTLE:
        return _result(battle, Outcome.REJECTED_INVALID_PHASE)
    if not battle.initiative:
        return _result(battle, Outcome.REJECTED_EMPTY_INITIATIVE)

    updated = _working_copy(battle)
    departing = current_unit(updated)
    if departing is not None and departing in updated.units:
        updated.units[departing].activated = False

    updated.current_turn = (updated.current_turn + 1) % len(updated.initiative)
    if updated.current_turn == 0:
        updated.round += 1
        for record in updated.units.values():
            record.used_reaction = False
        _append_log(updated, LogEventType.ROUND_END.value, round=updated.round - 1)
        _append_log(updated, LogEventType.ROUND_START.value, round=updated.round)
    return _result(updated)


def use_reaction(battle: Battle, unit_id: UnitID) -> Transition[Battle]:
    """Spend a unit's reaction for the current round."""

    if battle.phase is not BattlePhase.BATTLE:
        return _result(battle, Outcome.REJECTED_INVALID_PHASE)
    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    if battle.units[unit_id].used_reaction:
        return _result(battle, Outcome.REJECTED_DUPLICATE)
    updated = _working_copy(battle)
    updated.units[unit_id].used_reaction = True
    return _result(updated)


# --- Tokens and log -------------------------------------------------------------


def add_token(battle: Battle, unit_id: UnitID, token: str) -> Transition[Battle]:
    """Append a token to a unit; repeated tokens stack."""

    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(battle)
    updated.units[unit_id].tokens.append(token)
    return _result(updated)


def remove_token(battle: Battle, unit_id: UnitID, token: str) -> Transition[Battle]:
    """Remove every copy of ``token`` from a unit."""

    if unit_id not in battle.units:
        return _result(battle, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(battle)
    record = updated.units[unit_id]
    record.tokens = [existing for existing in record.tokens if existing != token]
    return _result(updated)


def log_event(battle: Battle, event_type: str, **details: Any) -> Transition[Battle]:
    """Append a free-form narrative entry to the battle log."""

    updated = _working_copy(battle)
    _append_log(updated, event_type, **details)
    return _result(updated)
