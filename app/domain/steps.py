"""Step graphs for the four checkout verticals.

Each graph is linear: the first element is the initial step and ``success``
is terminal. Domain values double as the first URL segment of the vertical.
"""

from enum import Enum

from app.core.exceptions import UnknownDomainError


class Domain(str, Enum):
    """Booking verticals."""

    HOTEL = "hotels"
    CAR_HIRE = "car-hire"
    VISA = "visa-application"
    INSURANCE = "travel-insurance"


STEP_GRAPHS: dict[Domain, tuple[str, ...]] = {
    Domain.HOTEL: ("search", "details", "guests", "payment", "success"),
    Domain.CAR_HIRE: ("search", "details", "contact", "payment", "success"),
    Domain.VISA: ("start", "personal", "passport", "appointment", "review", "payment", "success"),
    Domain.INSURANCE: ("plans", "details", "travelers", "review", "payment", "success"),
}

# Domains whose URLs carry the id of the item being booked
RESOURCE_DOMAINS = frozenset({Domain.HOTEL, Domain.CAR_HIRE})

# Session storage keys
STORAGE_KEYS: dict[Domain, str] = {
    Domain.HOTEL: "hotelFlow",
    Domain.CAR_HIRE: "carHireFlow",
    Domain.VISA: "visaFlow",
    Domain.INSURANCE: "insuranceFlow",
}

# Older snapshots cleared alongside the flow document
LEGACY_KEYS: dict[Domain, tuple[str, ...]] = {
    Domain.HOTEL: ("hotelBookingData",),
    Domain.CAR_HIRE: (),
    Domain.VISA: (),
    Domain.INSURANCE: (),
}


def resolve_domain(value: "Domain | str") -> Domain:
    """Convert a domain identifier to :class:`Domain`.

    Raises:
        UnknownDomainError: If the identifier is not one of the four verticals
    """
    if isinstance(value, Domain):
        return value
    try:
        return Domain(value)
    except ValueError:
        raise UnknownDomainError(str(value)) from None


def graph_for(domain: "Domain | str") -> tuple[str, ...]:
    return STEP_GRAPHS[resolve_domain(domain)]


def first_step(domain: "Domain | str") -> str:
    return graph_for(domain)[0]


def terminal_step(domain: "Domain | str") -> str:
    return graph_for(domain)[-1]


def is_valid_step(domain: "Domain | str", step: str) -> bool:
    return step in graph_for(domain)
