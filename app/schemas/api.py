"""Request and response schemas for the flow API.

Flow states travel in the same tagged-envelope form they are stored in, so
dates survive the trip to the storefront and back.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.steps import Domain


class FlowUpdateRequest(BaseModel):
    """Fields to replace; omitted fields are left untouched."""

    model_config = ConfigDict(extra="forbid")

    domain_entity: dict[str, Any] | None = None
    criteria: dict[str, Any] | None = None
    collected_inputs: list[dict[str, Any]] | dict[str, Any] | None = None
    payment_details: dict[str, Any] | None = None
    step: str | None = Field(None, max_length=32)


class FlowResponse(BaseModel):
    """Flow state with its position in the step graph."""

    domain: Domain
    session_id: str
    state: dict[str, Any]
    steps: list[str]
    progress: float
    next_step: str | None
    previous_step: str | None


class GateResponse(BaseModel):
    """Whether the stored data allows entering a step."""

    domain: Domain
    step: str
    can_enter: bool
    first_unmet_step: str | None


class NavigationResponse(BaseModel):
    """Steps reachable from the current one."""

    domain: Domain
    current_step: str
    next_step: str | None
    previous_step: str | None
    accessible_steps: list[str]
    progress: float


class RouteDecisionResponse(BaseModel):
    """Route guard outcome for a URL path."""

    path: str
    allowed: bool
    redirect_to: str | None = None
    reason: str | None = None
    domain: Domain | None = None
    resource_id: str | None = None
    step: str | None = None
    criteria: dict[str, Any] | None = None


class RouteFormatResponse(BaseModel):
    """Canonical URL of a flow position."""

    domain: Domain
    resource_id: str | None
    step: str
    segments: list[str]
    path: str
    query: str = ""
