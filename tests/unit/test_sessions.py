"""Unit tests for per-conversation session storage"""

import threading
import pytest
from negotiation_gateway.domain.exceptions import SessionNotFoundError
from negotiation_gateway.domain.models import NegotiationState, PlanProposal
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.infrastructure.sessions import SessionStore


def test_create_uses_default_debt(store: SessionStore):
    session_id = store.create()

    assert store.get(session_id) == NegotiationState(debt_amount=2400, stage=0)


def test_create_with_debt(store: SessionStore):
    session_id = store.create(1200)

    assert store.get(session_id).debt_amount == 1200


def test_unknown_session(store: SessionStore):
    with pytest.raises(SessionNotFoundError):
        store.get("missing")
    with pytest.raises(SessionNotFoundError):
        with store.transaction("missing"):
            pass
    with pytest.raises(SessionNotFoundError):
        store.delete("missing")


def test_transaction_persists_decision_state(store: SessionStore, engine: NegotiationEngine):
    session_id = store.create()

    with store.transaction(session_id) as session:
        session.apply(engine.evaluate_and_negotiate(session.state, PlanProposal("monthly", 50, 12)))

    assert store.get(session_id).stage == 1


def test_transaction_discards_state_on_error(store: SessionStore):
    session_id = store.create()

    with pytest.raises(RuntimeError):
        with store.transaction(session_id) as session:
            session.state = session.state.advance()
            raise RuntimeError("boom")

    assert store.get(session_id).stage == 0


def test_sessions_are_isolated(store: SessionStore, engine: NegotiationEngine):
    first = store.create(2400)
    second = store.create(1200)

    with store.transaction(first) as session:
        session.apply(engine.evaluate_and_negotiate(session.state, PlanProposal("monthly", 50, 12)))

    assert store.get(first).stage == 1
    assert store.get(second) == NegotiationState(debt_amount=1200, stage=0)


def test_concurrent_transactions_serialize(store: SessionStore):
    session_id = store.create()

    def bump():
        for _ in range(50):
            with store.transaction(session_id) as session:
                session.state = session.state.advance()

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.get(session_id).stage == 200


def test_delete_session(store: SessionStore):
    session_id = store.create()
    store.delete(session_id)

    assert session_id not in store.list_ids()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_idle_session_expires():
    clock = FakeClock()
    store = SessionStore(2400, idle_ttl_seconds=60, clock=clock)
    session_id = store.create()

    clock.now = 61
    with pytest.raises(SessionNotFoundError):
        store.get(session_id)
    assert store.list_ids() == []


def test_transaction_keeps_session_alive():
    clock = FakeClock()
    store = SessionStore(2400, idle_ttl_seconds=60, clock=clock)
    session_id = store.create()

    clock.now = 50
    with store.transaction(session_id) as session:
        session.state = session.state.advance()

    clock.now = 100
    assert store.get(session_id).stage == 1


def test_create_sweeps_idle_sessions():
    clock = FakeClock()
    store = SessionStore(2400, idle_ttl_seconds=60, clock=clock)
    store.create()
    store.create()

    clock.now = 61
    fresh = store.create()

    assert store.list_ids() == [fresh]


def test_evict_idle_spares_session_in_transaction():
    clock = FakeClock()
    store = SessionStore(2400, idle_ttl_seconds=60, clock=clock)
    busy = store.create()
    idle = store.create()

    with store.transaction(busy):
        clock.now = 61
        assert store.evict_idle() == 1

    assert store.list_ids() == [busy]
    assert idle not in store.list_ids()


def test_zero_ttl_never_expires():
    clock = FakeClock()
    store = SessionStore(2400, idle_ttl_seconds=0, clock=clock)
    session_id = store.create()

    clock.now = 10**9
    assert store.evict_idle() == 0
    assert store.get(session_id).debt_amount == 2400
