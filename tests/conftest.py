"""Shared fixtures for flow engine tests.

Every test gets its own in-memory backend, so sessions never leak between
tests and no Redis server is needed.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure the project root is importable when pytest runs from elsewhere
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.api.deps import get_backend  # noqa: E402
from app.domain.steps import Domain  # noqa: E402
from app.main import app  # noqa: E402
from app.services.flow_engine import FlowEngine, FlowSession  # noqa: E402
from app.services.session_store import MemoryBackend, SessionStore  # noqa: E402

SESSION_ID = "test-session"


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend(ttl_seconds=3600)


@pytest.fixture
def store(backend: MemoryBackend) -> SessionStore:
    return SessionStore(backend, SESSION_ID)


@pytest.fixture
def session(store: SessionStore) -> FlowSession:
    return FlowSession(store)


@pytest.fixture
def hotel(session: FlowSession) -> FlowEngine:
    return session.engine(Domain.HOTEL)


@pytest.fixture
def car_hire(session: FlowSession) -> FlowEngine:
    return session.engine(Domain.CAR_HIRE)


@pytest.fixture
def visa(session: FlowSession) -> FlowEngine:
    return session.engine(Domain.VISA)


@pytest.fixture
def insurance(session: FlowSession) -> FlowEngine:
    return session.engine(Domain.INSURANCE)


@pytest.fixture
def client(backend: MemoryBackend) -> Generator[TestClient, None, None]:
    """HTTP client bound to the test backend, sending a session header."""
    app.dependency_overrides[get_backend] = lambda: backend
    with TestClient(app, headers={"X-Session-ID": SESSION_ID}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def hotel_selection() -> dict:
    return {"id": "h1", "name": "Harbour View", "rating": 4}


@pytest.fixture
def stay_criteria() -> dict:
    from datetime import date

    return {
        "check_in": date(2026, 11, 2),
        "check_out": date(2026, 11, 5),
        "rooms": 1,
        "adults": 2,
    }


@pytest.fixture
def guest() -> dict:
    return {"first_name": "Ana", "last_name": "Silva", "email": "ana@example.com"}
