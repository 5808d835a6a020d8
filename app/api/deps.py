"""API dependencies for session resolution and flow engines."""

from functools import lru_cache
from typing import Annotated

from fastapi import Cookie, Depends, Header

from app.config import settings
from app.core.exceptions import ValidationError
from app.domain.routes import is_valid_resource_id
from app.services.flow_engine import FlowEngine, FlowSession
from app.services.session_store import KeyValueBackend, SessionStore, build_backend


@lru_cache
def get_backend() -> KeyValueBackend:
    """Get the process-wide session store backend."""
    return build_backend()


def get_session_id(
    header_session_id: Annotated[str | None, Header(alias=settings.session_header_name)] = None,
    cookie_session_id: Annotated[str | None, Cookie(alias=settings.session_cookie_name)] = None,
) -> str:
    """Resolve the browsing session from the header, then the cookie."""
    session_id = header_session_id or cookie_session_id
    if not session_id:
        raise ValidationError(
            f"Session required: send the {settings.session_header_name} header "
            f"or the {settings.session_cookie_name} cookie"
        )
    # Same alphabet as resource ids; the value becomes part of a storage key
    if len(session_id) > 128 or not is_valid_resource_id(session_id):
        raise ValidationError("Malformed session id")
    return session_id


def get_flow_session(
    session_id: Annotated[str, Depends(get_session_id)],
    backend: Annotated[KeyValueBackend, Depends(get_backend)],
) -> FlowSession:
    """Flow engines bound to the caller's session."""
    return FlowSession(SessionStore(backend, session_id))


def get_flow_engine(
    domain: str,
    session: Annotated[FlowSession, Depends(get_flow_session)],
) -> FlowEngine:
    """Engine for the domain in the path; unknown domains are a 404."""
    return session.engine(domain)
