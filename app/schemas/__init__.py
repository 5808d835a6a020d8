"""Pydantic schemas for flow states and API validation."""

from app.schemas.api import (
    FlowResponse,
    FlowUpdateRequest,
    GateResponse,
    NavigationResponse,
    RouteDecisionResponse,
    RouteFormatResponse,
)
from app.schemas.flow import (
    CarHireFlowState,
    CarHireInputs,
    FlowState,
    HotelFlowState,
    InsuranceFlowState,
    VisaFlowState,
    default_state,
)

__all__ = [
    # Flow state
    "FlowState",
    "HotelFlowState",
    "CarHireFlowState",
    "CarHireInputs",
    "VisaFlowState",
    "InsuranceFlowState",
    "default_state",
    # API
    "FlowUpdateRequest",
    "FlowResponse",
    "GateResponse",
    "NavigationResponse",
    "RouteDecisionResponse",
    "RouteFormatResponse",
]
