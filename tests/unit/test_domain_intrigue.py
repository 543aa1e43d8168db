"""Unit tests for the intrigue engine."""

from __future__ import annotations

from kingdoms.domain import intrigue
from kingdoms.domain.actions import create_skill_test_action, create_special_action
from kingdoms.domain.enums import IntriguePhase, LogEventType, Outcome
from kingdoms.domain.models import DomainID, Intrigue

D1 = DomainID("d1")
D2 = DomainID("d2")
D3 = DomainID("d3")


def _session(*domain_ids: DomainID) -> Intrigue:
    state = intrigue.create_intrigue("Court of Whispers")
    for domain_id in domain_ids:
        state = intrigue.add_domain(state, domain_id).state
    return state


def _active() -> Intrigue:
    state = intrigue.set_initiator(_session(D2, D1, D3), D1).state
    return intrigue.start_intrigue(state).state


def test_default_turn_order_puts_initiator_first():
    state = _active()
    assert state.phase is IntriguePhase.ACTIVE
    assert state.turn_order == [D1, D2, D3]
    assert state.current_domain_index == 0
    assert state.log[-1].type == LogEventType.INTRIGUE_START


def test_explicit_turn_order_is_kept():
    state = intrigue.set_initiator(_session(D1, D2, D3), D1).state
    state = intrigue.set_turn_order(state, [D3, D1, D2]).state
    state = intrigue.start_intrigue(state).state
    assert state.turn_order == [D3, D1, D2]
    assert intrigue.current_domain(state) == D3


def test_set_turn_order_validation():
    state = _session(D1, D2)
    assert intrigue.set_turn_order(state, [D1, D3]).outcome is Outcome.REJECTED_UNKNOWN_ID
    active = _active()
    assert intrigue.set_turn_order(active, [D3, D2, D1]).outcome is Outcome.REJECTED_INVALID_PHASE


def test_start_requires_initiator():
    result = intrigue.start_intrigue(_session(D1, D2))
    assert result.outcome is Outcome.REJECTED_NO_INITIATOR
    assert result.state.phase is IntriguePhase.SETUP


def test_start_requires_two_domains():
    state = intrigue.set_initiator(_session(D1), D1).state
    assert intrigue.start_intrigue(state).outcome is Outcome.REJECTED_TOO_FEW_DOMAINS


def test_start_twice_is_rejected():
    assert intrigue.start_intrigue(_active()).outcome is Outcome.REJECTED_INVALID_PHASE


def test_set_initiator_for_outsider_only_enrolls():
    state = _session(D1)
    result = intrigue.set_initiator(state, D2)
    assert result.outcome is Outcome.DOMAIN_ENROLLED
    assert result.state.domains == [D1, D2]
    assert result.state.initiator is None
    assert intrigue.set_initiator(result.state, D2).state.initiator == D2


def test_add_domain_twice_is_rejected():
    assert intrigue.add_domain(_session(D1), D1).outcome is Outcome.REJECTED_DUPLICATE


def test_take_turn_records_and_advances():
    state = _active()
    action = create_skill_test_action("espionage", target=str(D2), difficulty=12)
    result = intrigue.take_turn(state, D1, action)
    assert result.applied
    updated = result.state
    assert updated.current_domain_index == 1
    assert updated.turns[-1].domain_id == D1
    assert updated.turns[-1].action == action
    entry = updated.log[-1]
    assert entry.type == LogEventType.TURN_TAKEN
    assert entry.details["domain_id"] == D1
    assert entry.details["action"]["type"] == "skill_test"
    assert entry.details["action"]["difficulty"] == 12
    assert state.turns == []


def test_turn_order_wraps():
    state = _active()
    for domain_id in (D1, D2, D3):
        state = intrigue.take_turn(state, domain_id, create_special_action("Feast")).state
    assert state.current_domain_index == 0
    assert len(state.turns) == 3


def test_take_turn_rejections():
    action = create_special_action("Feast")
    assert intrigue.take_turn(_session(D1, D2), D1, action).outcome is (
        Outcome.REJECTED_INVALID_PHASE
    )
    state = _active()
    assert intrigue.take_turn(state, DomainID("d9"), action).outcome is (
        Outcome.REJECTED_UNKNOWN_ID
    )
    result = intrigue.take_turn(state, D2, action)
    assert result.outcome is Outcome.REJECTED_NOT_YOUR_TURN
    assert result.state is state


def test_remove_domain_clears_initiator_and_turn_order():
    state = _active()
    state = intrigue.take_turn(state, D1, create_special_action("Feast")).state
    state = intrigue.take_turn(state, D2, create_special_action("Feast")).state
    assert state.current_domain_index == 2

    result = intrigue.remove_domain(state, D1)
    assert result.applied
    assert result.state.initiator is None
    assert result.state.turn_order == [D2, D3]
    assert intrigue.current_domain(result.state) == D3
    assert intrigue.take_turn(result.state, D3, create_special_action("Feast")).applied
    assert intrigue.remove_domain(result.state, D1).outcome is Outcome.REJECTED_UNKNOWN_ID


def test_removing_acting_domain_passes_the_turn_on():
    state = intrigue.take_turn(_active(), D1, create_special_action("Feast")).state
    assert intrigue.current_domain(intrigue.remove_domain(state, D2).state) == D3

    state = intrigue.take_turn(state, D2, create_special_action("Feast")).state
    last = intrigue.remove_domain(state, D3).state
    assert last.current_domain_index == 0
    assert intrigue.current_domain(last) == D1


def test_removing_later_domain_keeps_the_turn():
    state = intrigue.take_turn(_active(), D1, create_special_action("Feast")).state
    assert intrigue.current_domain(intrigue.remove_domain(state, D3).state) == D2


def test_end_intrigue():
    result = intrigue.end_intrigue(_active())
    assert result.state.phase is IntriguePhase.RESOLUTION
    assert result.state.log[-1].type == LogEventType.INTRIGUE_END
    assert intrigue.end_intrigue(result.state).outcome is Outcome.REJECTED_INVALID_PHASE


def test_log_event():
    state = intrigue.log_event(_session(D1), "rumour", text="The duke is ill").state
    assert state.log[-1].details == {"text": "The duke is ill"}
