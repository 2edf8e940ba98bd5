"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.infrastructure.sessions import SessionStore

_session_store = SessionStore()
_engine = NegotiationEngine()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_store() -> SessionStore:
    """Provide the process-wide session store"""
    return _session_store


def get_engine() -> NegotiationEngine:
    """Provide the negotiation engine configured from settings"""
    return _engine
