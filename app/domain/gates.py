"""Data prerequisites for entering each checkout step.

Gates are advisory: they report whether enough data has been collected to
enter a step and never block a write. Steps without an entry are always
enterable, which covers the first step of every domain.

States:
- hotel: search → details → guests → payment → success
- car-hire: search → details → contact → payment → success
- visa: start → personal → passport → appointment → review → payment → success
- insurance: plans → details → travelers → review → payment → success
"""

from collections.abc import Callable
from typing import Any

from app.domain.steps import Domain, graph_for, resolve_domain

Predicate = Callable[[Any], bool]


def _has_entity(state) -> bool:
    return state.domain_entity is not None


def _has_criteria(state) -> bool:
    return state.criteria is not None


def _has_inputs(state) -> bool:
    return len(state.collected_inputs) > 0


def _has_payment(state) -> bool:
    return state.payment_details is not None


def _all(*predicates: Predicate) -> Predicate:
    def check(state) -> bool:
        return all(predicate(state) for predicate in predicates)

    return check


# Car hire
def _has_driver_info(state) -> bool:
    return state.collected_inputs.driver_info is not None


# Visa
def _travelers_have_passports(state) -> bool:
    return all(traveler.get("passport_info") is not None for traveler in state.collected_inputs)


def _has_appointment(state) -> bool:
    return _has_entity(state) and state.domain_entity.get("appointment_location") is not None


def _is_submitted(state) -> bool:
    return _has_entity(state) and state.domain_entity.get("status") == "submitted"


GATE_TABLE: dict[tuple[Domain, str], Predicate] = {
    # Hotel
    (Domain.HOTEL, "details"): _has_criteria,
    (Domain.HOTEL, "guests"): _all(_has_entity, _has_criteria),
    (Domain.HOTEL, "payment"): _all(_has_entity, _has_criteria, _has_inputs),
    (Domain.HOTEL, "success"): _all(_has_entity, _has_criteria, _has_inputs, _has_payment),
    # Car hire. Payment checks driver_info only, not emergency_contact.
    (Domain.CAR_HIRE, "details"): _has_criteria,
    (Domain.CAR_HIRE, "contact"): _all(_has_entity, _has_criteria),
    (Domain.CAR_HIRE, "payment"): _all(_has_entity, _has_criteria, _has_driver_info),
    (Domain.CAR_HIRE, "success"): _all(_has_entity, _has_criteria, _has_driver_info, _has_payment),
    # Visa
    (Domain.VISA, "personal"): _has_entity,
    (Domain.VISA, "passport"): _all(_has_entity, _has_inputs),
    (Domain.VISA, "appointment"): _all(_has_entity, _has_inputs, _travelers_have_passports),
    (Domain.VISA, "review"): _has_appointment,
    (Domain.VISA, "payment"): _has_appointment,
    (Domain.VISA, "success"): _is_submitted,
    # Insurance
    (Domain.INSURANCE, "details"): _has_entity,
    (Domain.INSURANCE, "travelers"): _all(_has_entity, _has_criteria),
    (Domain.INSURANCE, "review"): _all(_has_entity, _has_criteria, _has_inputs),
    (Domain.INSURANCE, "payment"): _all(_has_entity, _has_criteria, _has_inputs),
    (Domain.INSURANCE, "success"): _all(_has_entity, _has_criteria, _has_inputs, _has_payment),
}


def can_enter(domain: Domain | str, step: str, state) -> bool:
    """Check whether ``state`` holds the data required to enter ``step``."""
    predicate = GATE_TABLE.get((resolve_domain(domain), step))
    if predicate is None:
        return True
    return predicate(state)


def first_unmet_step(domain: Domain | str, target: str, state) -> str | None:
    """Return the first step up to ``target`` whose gate fails.

    Args:
        domain: Booking domain
        target: Step the visitor is trying to reach
        state: Current flow state of the domain

    Returns:
        The earliest blocked step, or None if every gate up to ``target`` passes
        (also None when ``target`` is not part of the graph)
    """
    graph = graph_for(domain)
    if target not in graph:
        return None
    for step in graph[: graph.index(target) + 1]:
        if not can_enter(domain, step, state):
            return step
    return None
