"""Flow state schemas, one variant per booking domain.

Entity, criteria and payment payloads are produced by the storefront pages
and kept as plain dicts; only the fields the gates read are named here.
"""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.domain.steps import STEP_GRAPHS, Domain, first_step, is_valid_step, resolve_domain

# Fields a caller may replace through an update
UPDATABLE_FIELDS = frozenset(
    {"domain_entity", "criteria", "collected_inputs", "payment_details", "step"}
)


def utcnow() -> datetime:
    return datetime.now(UTC)


class FlowState(BaseModel):
    """Persisted progress and collected data for one domain in one session."""

    model_config = ConfigDict(extra="ignore")

    domain: Domain
    domain_entity: dict[str, Any] | None = None
    criteria: dict[str, Any] | None = None
    payment_details: dict[str, Any] | None = None
    step: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @model_validator(mode="after")
    def check_invariants(self) -> "FlowState":
        if not is_valid_step(self.domain, self.step):
            raise ValueError(f"step '{self.step}' is not part of the {self.domain.value} flow")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    @property
    def graph(self) -> tuple[str, ...]:
        return STEP_GRAPHS[self.domain]


class HotelFlowState(FlowState):
    """Hotel checkout: selected hotel, stay search, guest list."""

    domain: Literal[Domain.HOTEL] = Domain.HOTEL
    step: str = first_step(Domain.HOTEL)
    collected_inputs: list[dict[str, Any]] = Field(default_factory=list)


class CarHireInputs(BaseModel):
    """Driver details gathered on the contact step."""

    model_config = ConfigDict(extra="ignore")

    driver_info: dict[str, Any] | None = None
    emergency_contact: dict[str, Any] | None = None
    extras: list[dict[str, Any]] = Field(default_factory=list)


class CarHireFlowState(FlowState):
    """Car hire checkout: selected car, rental search, driver details."""

    domain: Literal[Domain.CAR_HIRE] = Domain.CAR_HIRE
    step: str = first_step(Domain.CAR_HIRE)
    collected_inputs: CarHireInputs = Field(default_factory=CarHireInputs)


class VisaFlowState(FlowState):
    """Visa application: the application record and its travelers.

    ``domain_entity`` carries ``appointment_location`` and ``status``; each
    traveler in ``collected_inputs`` carries ``passport_info`` once the
    passport step is done.
    """

    domain: Literal[Domain.VISA] = Domain.VISA
    step: str = first_step(Domain.VISA)
    collected_inputs: list[dict[str, Any]] = Field(default_factory=list)


class InsuranceFlowState(FlowState):
    """Travel insurance: chosen policy, trip details, insured travelers."""

    domain: Literal[Domain.INSURANCE] = Domain.INSURANCE
    step: str = first_step(Domain.INSURANCE)
    collected_inputs: list[dict[str, Any]] = Field(default_factory=list)


FLOW_STATE_MODELS: dict[Domain, type[FlowState]] = {
    Domain.HOTEL: HotelFlowState,
    Domain.CAR_HIRE: CarHireFlowState,
    Domain.VISA: VisaFlowState,
    Domain.INSURANCE: InsuranceFlowState,
}


def default_state(domain: Domain | str) -> FlowState:
    """Fresh state: first step, nothing collected, both timestamps equal."""
    model = FLOW_STATE_MODELS[resolve_domain(domain)]
    now = utcnow()
    return model(created_at=now, updated_at=now)
