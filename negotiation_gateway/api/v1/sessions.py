"""/v1/sessions - negotiation session lifecycle"""

from fastapi import APIRouter, Depends, HTTPException, Response

from negotiation_gateway.api.v1.schemas import CreateSessionRequest, SessionResponse
from negotiation_gateway.api.dependencies import get_session_store
from negotiation_gateway.domain.exceptions import SessionNotFoundError
from negotiation_gateway.infrastructure.sessions import SessionStore

router = APIRouter()


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(
    request_body: CreateSessionRequest | None = None,
    store: SessionStore = Depends(get_session_store),
):
    """Open a negotiation for one conversation at stage 0"""
    debt_amount = request_body.debt_amount if request_body else None
    session_id = store.create(debt_amount)
    state = store.get(session_id)
    return SessionResponse(session_id=session_id, debt_amount=state.debt_amount, stage=state.stage)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        state = store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    return SessionResponse(session_id=session_id, debt_amount=state.debt_amount, stage=state.stage)


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=204)
