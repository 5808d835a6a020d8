"""Flow state endpoints, one resource per booking domain."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_flow_engine
from app.core.codec import decode, encode
from app.core.exceptions import CodecError, ValidationError
from app.domain.navigation import is_accessible
from app.domain.steps import is_valid_step
from app.schemas.api import (
    FlowResponse,
    FlowUpdateRequest,
    GateResponse,
    NavigationResponse,
)
from app.schemas.flow import FlowState
from app.services.flow_engine import FlowEngine

router = APIRouter()


def _flow_response(engine: FlowEngine, state: FlowState) -> FlowResponse:
    return FlowResponse(
        domain=engine.domain,
        session_id=engine.session_id,
        state=encode(state.model_dump()),
        steps=list(engine.graph),
        progress=engine.progress(),
        next_step=engine.next_step(),
        previous_step=engine.previous_step(),
    )


@router.get("/{domain}", response_model=FlowResponse)
def get_flow(
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> FlowResponse:
    """Get the stored flow state, or the default for a fresh session."""
    return _flow_response(engine, engine.get())


@router.patch("/{domain}", response_model=FlowResponse)
def update_flow(
    request: FlowUpdateRequest,
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> FlowResponse:
    """Replace whole sub-objects of the flow state.

    Values may use the ``{"kind", "payload"}`` envelope for dates.
    """
    try:
        changes = decode(request.model_dump(exclude_unset=True))
    except CodecError as e:
        raise ValidationError(str(e))
    state = engine.update(changes)
    return _flow_response(engine, state)


@router.post("/{domain}/complete", response_model=FlowResponse)
def complete_flow(
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> FlowResponse:
    """Move the flow to its terminal step."""
    state = engine.complete()
    return _flow_response(engine, state)


@router.delete("/{domain}", status_code=status.HTTP_204_NO_CONTENT)
def clear_flow(
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> None:
    """Discard the flow state."""
    engine.clear()


@router.get("/{domain}/gates/{step}", response_model=GateResponse)
def check_gate(
    step: str,
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> GateResponse:
    """Report whether the stored data allows entering a step."""
    if not is_valid_step(engine.domain, step):
        raise ValidationError(f"step '{step}' is not part of the {engine.domain.value} flow")
    return GateResponse(
        domain=engine.domain,
        step=step,
        can_enter=engine.can_enter(step),
        first_unmet_step=engine.first_unmet_step(step),
    )


@router.get("/{domain}/navigation", response_model=NavigationResponse)
def get_navigation(
    engine: Annotated[FlowEngine, Depends(get_flow_engine)],
) -> NavigationResponse:
    """Steps reachable from the current one."""
    current = engine.get().step
    return NavigationResponse(
        domain=engine.domain,
        current_step=current,
        next_step=engine.next_step(),
        previous_step=engine.previous_step(),
        accessible_steps=[s for s in engine.graph if is_accessible(s, current, engine.graph)],
        progress=engine.progress(),
    )
