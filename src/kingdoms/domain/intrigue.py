"""Intrigue engine.

An intrigue session runs ``setup -> active -> resolution``.  It starts once
an initiator is chosen and at least two domains take part; domains then
act one at a time in a fixed turn order, initiator first.

Transitions return a :class:`~kingdoms.domain.models.Transition` and never
raise for rejected requests.  Actions are resolved before they reach this
module; the engine only records them.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import asdict, replace
from typing import Any

from kingdoms.domain.actions import IntrigueAction
from kingdoms.domain.enums import IntriguePhase, LogEventType, Outcome
from kingdoms.domain.models import (
    DomainID,
    Intrigue,
    IntrigueID,
    IntrigueTurn,
    LogEntry,
    Transition,
    new_id,
    utc_now,
)

MIN_DOMAINS = 2


def create_intrigue(name: str) -> Intrigue:
    now = utc_now()
    return Intrigue(id=IntrigueID(new_id()), name=name, created=now, updated=now)


def _working_copy(intrigue: Intrigue) -> Intrigue:
    return replace(copy.deepcopy(intrigue), updated=utc_now())


def _result(intrigue: Intrigue, outcome: Outcome = Outcome.APPLIED) -> Transition[Intrigue]:
    return Transition(state=intrigue, outcome=outcome)


def _append_log(intrigue: Intrigue, event_type: str, **details: Any) -> None:
    intrigue.log.append(LogEntry(type=event_type, timestamp=utc_now(), details=details))


def current_domain(intrigue: Intrigue) -> DomainID | None:
    """Domain whose turn it is, or ``None`` before a turn order exists."""

    if 0 <= intrigue.current_domain_index < len(intrigue.turn_order):
        return intrigue.turn_order[intrigue.current_domain_index]
    return None


def add_domain(intrigue: Intrigue, domain_id: DomainID) -> Transition[Intrigue]:
    if domain_id in intrigue.domains:
        return _result(intrigue, Outcome.REJECTED_DUPLICATE)
    updated = _working_copy(intrigue)
    updated.domains.append(domain_id)
    return _result(updated)


def remove_domain(intrigue: Intrigue, domain_id: DomainID) -> Transition[Intrigue]:
    """Drop a domain from the session, its turn order slot and the initiator role."""

    if domain_id not in intrigue.domains:
        return _result(intrigue, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(intrigue)
    updated.domains = [did for did in updated.domains if did != domain_id]
    if updated.initiator == domain_id:
        updated.initiator = None
    earlier = updated.turn_order[: updated.current_domain_index].count(domain_id)
    updated.turn_order = [did for did in updated.turn_order if did != domain_id]
    if updated.turn_order:
        updated.current_domain_index = (
            updated.current_domain_index - earlier
        ) % len(updated.turn_order)
    else:
        updated.current_domain_index = 0
    return _result(updated)


def set_initiator(intrigue: Intrigue, domain_id: DomainID) -> Transition[Intrigue]:
    """Choose the domain that opened the intrigue.

    A domain that is not yet part of the session is only enrolled; the
    initiator stays as it was and the outcome is ``DOMAIN_ENROLLED``.
    """

    if domain_id not in intrigue.domains:
        enrolled = add_domain(intrigue, domain_id).state
        return _result(enrolled, Outcome.DOMAIN_ENROLLED)
    updated = _working_copy(intrigue)
    updated.initiator = domain_id
    return _result(updated)


def set_turn_order(intrigue: Intrigue, turn_order: Sequence[DomainID]) -> Transition[Intrigue]:
    """Replace the turn order; rejected once the session is under way."""

    if intrigue.phase is not IntriguePhase.SETUP:
        return _result(intrigue, Outcome.REJECTED_INVALID_PHASE)
    if any(did not in intrigue.domains for did in turn_order):
        return _result(intrigue, Outcome.REJECTED_UNKNOWN_ID)
    updated = _working_copy(intrigue)
    updated.turn_order = list(turn_order)
    updated.current_domain_index = 0
    return _result(updated)


def start_intrigue(intrigue: Intrigue) -> Transition[Intrigue]:
    """Open the session; builds ``[initiator, *others]`` if no turn order was set."""

    if intrigue.phase is not IntriguePhase.SETUP:
        return _result(intrigue, Outcome.REJECTED_INVALID_PHASE)
    if intrigue.initiator is None:
        return _result(intrigue, Outcome.REJECTED_NO_INITIATOR)
    if len(intrigue.domains) < MIN_DOMAINS:
        return _result(intrigue, Outcome.REJECTED_TOO_FEW_DOMAINS)

    updated = _working_copy(intrigue)
    updated.phase = IntriguePhase.ACTIVE
    if not updated.turn_order:
        others = [did for did in updated.domains if did != updated.initiator]
        updated.turn_order = [updated.initiator, *others]
    _append_log(updated, LogEventType.INTRIGUE_START.value)
    return _result(updated)


def end_intrigue(intrigue: Intrigue) -> Transition[Intrigue]:
    if intrigue.phase is not IntriguePhase.ACTIVE:
        return _result(intrigue, Outcome.REJECTED_INVALID_PHASE)
    updated = _working_copy(intrigue)
    updated.phase = IntriguePhase.RESOLUTION
    _append_log(updated, LogEventType.INTRIGUE_END.value)
    return _result(updated)


def take_turn(
    intrigue: Intrigue, domain_id: DomainID, action: IntrigueAction
) -> Transition[Intrigue]:
    """Record ``action`` as the current domain's turn and pass to the next domain."""

    if intrigue.phase is not IntriguePhase.ACTIVE:
        return _result(intrigue, Outcome.REJECTED_INVALID_PHASE)
    if domain_id not in intrigue.domains:
        return _result(intrigue, Outcome.REJECTED_UNKNOWN_ID)
    if current_domain(intrigue) != domain_id:
        return _result(intrigue, Outcome.REJECTED_NOT_YOUR_TURN)

    updated = _working_copy(intrigue)
    now = utc_now()
    updated.turns.append(IntrigueTurn(domain_id=domain_id, action=action, timestamp=now))
    _append_log(
        updated, LogEventType.TURN_TAKEN.value, domain_id=domain_id, action=asdict(action)
    )
    updated.current_domain_index = (updated.current_domain_index + 1) % len(updated.turn_order)
    return _result(updated)


def log_event(intrigue: Intrigue, event_type: str, **details: Any) -> Transition[Intrigue]:
    updated = _working_copy(intrigue)
    _append_log(updated, event_type, **details)
    return _result(updated)
