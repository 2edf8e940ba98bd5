"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient
from negotiation_gateway.api.main import create_app
from negotiation_gateway.api.dependencies import get_session_store
from negotiation_gateway.domain.models import NegotiationState
from negotiation_gateway.domain.negotiation import NegotiationEngine, NegotiationPolicy
from negotiation_gateway.infrastructure.sessions import SessionStore


@pytest.fixture
def engine() -> NegotiationEngine:
    """Engine with the stock policy, independent of any .env overrides"""
    return NegotiationEngine(NegotiationPolicy())


@pytest.fixture
def state() -> NegotiationState:
    """Fresh conversation over the default $2400 debt"""
    return NegotiationState(debt_amount=2400)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(default_debt_amount=2400)


@pytest.fixture
def client(store: SessionStore) -> TestClient:
    """Create FastAPI test client with an isolated session store"""
    app = create_app()
    app.dependency_overrides[get_session_store] = lambda: store
    return TestClient(app)
