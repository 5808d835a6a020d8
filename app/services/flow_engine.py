"""Booking flow engine.

One engine per domain per session, all backed by the same session store.
Every write is a full read-merge-write of the domain document; there is no
field-level patching, so callers replace whole sub-objects (the full guest
list, not one guest).

Gates and accessibility are reported, not enforced: ``update`` accepts any
step in the domain's graph and leaves sequencing to the caller.
"""

import logging
from typing import Any

from app.core.exceptions import InvalidFlowUpdate
from app.domain import gates, navigation
from app.domain.steps import (
    LEGACY_KEYS,
    STEP_GRAPHS,
    STORAGE_KEYS,
    Domain,
    resolve_domain,
    terminal_step,
)
from app.schemas.flow import UPDATABLE_FIELDS, FlowState, default_state
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

# Step a visitor moves on to once a sub-object has been collected
STEP_ON_UPDATE: dict[Domain, dict[str, str]] = {
    Domain.HOTEL: {
        "criteria": "details",
        "domain_entity": "guests",
        "collected_inputs": "payment",
        "payment_details": "payment",
    },
    Domain.CAR_HIRE: {
        "criteria": "details",
        "domain_entity": "contact",
        "collected_inputs": "payment",
        "payment_details": "payment",
    },
    Domain.VISA: {
        "criteria": "start",
        "domain_entity": "personal",
        "collected_inputs": "passport",
        "payment_details": "payment",
    },
    Domain.INSURANCE: {
        "domain_entity": "details",
        "criteria": "travelers",
        "collected_inputs": "review",
        "payment_details": "payment",
    },
}


class FlowEngine:
    """Get/update/clear/complete operations for one domain's flow state."""

    def __init__(self, domain: Domain | str, store: SessionStore) -> None:
        self.domain = resolve_domain(domain)
        self.graph = STEP_GRAPHS[self.domain]
        self.storage_key = STORAGE_KEYS[self.domain]
        self._store = store

    @property
    def session_id(self) -> str:
        return self._store.session_id

    def get(self) -> FlowState:
        """Current state, or a fresh default if nothing valid is stored."""
        return self._store.load(self.storage_key, default_state(self.domain))

    def update(self, partial: dict[str, Any] | None = None, **fields: Any) -> FlowState:
        """Replace whole fields of the state and persist it.

        Without an explicit ``step`` the flow advances to the furthest step
        that the supplied fields unlock (see ``STEP_ON_UPDATE``); it never
        moves backwards. An explicit ``step`` is written as given.

        Args:
            partial: Mapping of field name to new value
            **fields: Same, as keyword arguments

        Returns:
            FlowState: The state as written

        Raises:
            InvalidFlowUpdate: On unknown or managed fields, or an invalid result
        """
        changes = {**(partial or {}), **fields}
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidFlowUpdate(
                self.storage_key,
                f"fields not updatable: {', '.join(sorted(unknown))}",
            )

        if "step" not in changes:
            step = self._advanced_step(changes)
            if step is not None:
                changes["step"] = step

        state = self._store.save(self.storage_key, changes, default_state(self.domain))
        logger.debug(
            f"{self.domain.value} flow updated ({', '.join(sorted(changes)) or 'touch'}), "
            f"step={state.step}"
        )
        return state

    def clear(self) -> None:
        """Drop the stored state; the next ``get`` yields a fresh default."""
        self._store.clear(self.storage_key, *LEGACY_KEYS[self.domain])
        logger.info(f"{self.domain.value} flow cleared for session {self.session_id}")

    def complete(self) -> FlowState:
        """Move the flow to its terminal step."""
        state = self.update(step=terminal_step(self.domain))
        logger.info(f"{self.domain.value} flow completed for session {self.session_id}")
        return state

    def progress(self) -> float:
        return navigation.progress_percent(self.get().step, self.graph)

    # Gates and navigation

    def can_enter(self, step: str) -> bool:
        return gates.can_enter(self.domain, step, self.get())

    def first_unmet_step(self, target: str) -> str | None:
        return gates.first_unmet_step(self.domain, target, self.get())

    def next_step(self) -> str | None:
        return navigation.next_step(self.get().step, self.graph)

    def previous_step(self) -> str | None:
        return navigation.previous_step(self.get().step, self.graph)

    def can_navigate_to(self, target: str) -> bool:
        return navigation.is_accessible(target, self.get().step, self.graph)

    def _advanced_step(self, changes: dict[str, Any]) -> str | None:
        targets = [STEP_ON_UPDATE[self.domain][f] for f in changes if f in STEP_ON_UPDATE[self.domain]]
        if not targets:
            return None
        current = self.get().step
        # Editing earlier data never rewinds the flow
        return max([current, *targets], key=self.graph.index)

    # Per-field setters

    def select_entity(self, entity: dict[str, Any]) -> FlowState:
        return self.update(domain_entity=entity)

    def set_criteria(self, criteria: dict[str, Any]) -> FlowState:
        return self.update(criteria=criteria)

    def set_inputs(self, inputs: Any) -> FlowState:
        return self.update(collected_inputs=inputs)

    def set_payment_details(self, payment_details: dict[str, Any]) -> FlowState:
        return self.update(payment_details=payment_details)


class FlowSession:
    """Engines for all four domains of one browsing session."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store
        self._engines: dict[Domain, FlowEngine] = {}

    @property
    def session_id(self) -> str:
        return self.store.session_id

    def engine(self, domain: Domain | str) -> FlowEngine:
        domain = resolve_domain(domain)
        if domain not in self._engines:
            self._engines[domain] = FlowEngine(domain, self.store)
        return self._engines[domain]

    def snapshot(self) -> dict[Domain, FlowState]:
        return {domain: self.engine(domain).get() for domain in Domain}

    def clear_all(self) -> None:
        for domain in Domain:
            self.engine(domain).clear()
