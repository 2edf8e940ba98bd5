"""In-memory negotiation sessions keyed by conversation identifier"""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from negotiation_gateway.config import settings
from negotiation_gateway.domain.exceptions import SessionNotFoundError
from negotiation_gateway.domain.models import Decision, NegotiationState


class SessionHandle:
    """Mutable view of one session, valid only inside SessionStore.transaction"""

    def __init__(self, session_id: str, state: NegotiationState):
        self.session_id = session_id
        self.state = state

    def apply(self, decision: Decision) -> Decision:
        """Keep the state produced by an engine call"""
        self.state = decision.state
        return decision


class SessionStore:
    """
    Holds one NegotiationState per conversation.

    A store-wide lock guards the session map; each session has its own lock
    held for the whole of a transaction, so two requests for the same
    conversation never interleave and separate conversations never share
    state.

    Sessions not used in a transaction for longer than idle_ttl_seconds are
    dropped, lazily on lookup and in a sweep on every create. A session in
    the middle of a transaction is never dropped.
    """

    def __init__(
        self,
        default_debt_amount: float | None = None,
        idle_ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_debt_amount = default_debt_amount or settings.default_debt_amount
        self.idle_ttl_seconds = settings.session_idle_ttl_seconds if idle_ttl_seconds is None else idle_ttl_seconds
        self._clock = clock
        self._states: Dict[str, NegotiationState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._last_used: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create(self, debt_amount: float | None = None) -> str:
        self.evict_idle()

        session_id = str(uuid.uuid4())
        state = NegotiationState(debt_amount=debt_amount or self.default_debt_amount)
        with self._lock:
            self._states[session_id] = state
            self._locks[session_id] = threading.Lock()
            self._last_used[session_id] = self._clock()
        return session_id

    def get(self, session_id: str) -> NegotiationState:
        with self._lock:
            state = self._lookup(session_id)
        if state is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return state

    def delete(self, session_id: str) -> None:
        with self._lock:
            if session_id not in self._states:
                raise SessionNotFoundError(f"Session {session_id} not found")
            self._drop(session_id)

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def evict_idle(self) -> int:
        """Drop every idle session that isn't mid-transaction; returns how many went"""
        if self.idle_ttl_seconds <= 0:
            return 0

        with self._lock:
            now = self._clock()
            expired = [
                session_id
                for session_id in self._states
                if self._is_idle(session_id, now) and not self._locks[session_id].locked()
            ]
            for session_id in expired:
                self._drop(session_id)

        if expired:
            logging.info("Evicted idle sessions", extra={"evicted": len(expired)})
        return len(expired)

    @contextmanager
    def transaction(self, session_id: str) -> Iterator[SessionHandle]:
        """
        Serialize work on one session.

        The handle's state is written back only if the block completes;
        an exception leaves the stored state as it was. Either way the
        session counts as used.
        """
        with self._lock:
            session_lock: Optional[threading.Lock] = None
            if self._lookup(session_id) is not None:
                session_lock = self._locks[session_id]
        if session_lock is None:
            raise SessionNotFoundError(f"Session {session_id} not found")

        with session_lock:
            handle = SessionHandle(session_id, self.get(session_id))
            try:
                yield handle
                with self._lock:
                    if session_id in self._states:
                        self._states[session_id] = handle.state
            finally:
                with self._lock:
                    if session_id in self._last_used:
                        self._last_used[session_id] = self._clock()

    # The helpers below expect self._lock to be held

    def _is_idle(self, session_id: str, now: float) -> bool:
        return self.idle_ttl_seconds > 0 and now - self._last_used[session_id] > self.idle_ttl_seconds

    def _lookup(self, session_id: str) -> Optional[NegotiationState]:
        state = self._states.get(session_id)
        if state is None:
            return None
        if self._is_idle(session_id, self._clock()) and not self._locks[session_id].locked():
            self._drop(session_id)
            return None
        return state

    def _drop(self, session_id: str) -> None:
        del self._states[session_id]
        del self._locks[session_id]
        del self._last_used[session_id]
