"""URL path ⇄ (domain, resource id, step) mapping.

Resource domains (hotels, car-hire):
    /{domain}                     → first step, no resource id
    /{domain}/{resource_id}       → details
    /{domain}/{resource_id}/{step}
Resource-less domains (visa-application, travel-insurance):
    /{domain}                     → first step
    /{domain}/{step}

Anything else maps to None; parsing never raises. Hotel step URLs may carry
the search criteria as a query string (see :func:`to_path` and
:func:`parse_criteria`).
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from urllib.parse import parse_qs, urlencode

from app.domain.steps import RESOURCE_DOMAINS, STEP_GRAPHS, Domain, resolve_domain

RESOURCE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Step implied by /{domain}/{resource_id}
RESOURCE_LANDING_STEP = "details"


@dataclass(frozen=True)
class RouteMatch:
    """A checkout URL resolved to its flow position."""

    domain: Domain
    step: str
    resource_id: str | None = None


def is_valid_resource_id(resource_id: str) -> bool:
    return bool(RESOURCE_ID_PATTERN.match(resource_id))


def split_path(path: str) -> list[str]:
    """Split a URL path into segments, ignoring query, fragment and empty parts."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    return [segment for segment in path.split("/") if segment]


def parse(path: str | Sequence[str]) -> RouteMatch | None:
    """Resolve a path (string or segment list) to a :class:`RouteMatch`."""
    segments = split_path(path) if isinstance(path, str) else [s for s in path if s]
    if not segments:
        return None

    try:
        domain = Domain(segments[0])
    except ValueError:
        return None

    graph = STEP_GRAPHS[domain]
    rest = segments[1:]

    if domain in RESOURCE_DOMAINS:
        if not rest:
            return RouteMatch(domain=domain, step=graph[0])
        if len(rest) > 2 or not is_valid_resource_id(rest[0]):
            return None
        step = rest[1] if len(rest) == 2 else RESOURCE_LANDING_STEP
        if step not in graph:
            return None
        return RouteMatch(domain=domain, step=step, resource_id=rest[0])

    if not rest:
        return RouteMatch(domain=domain, step=graph[0])
    if len(rest) > 1 or rest[0] not in graph:
        return None
    return RouteMatch(domain=domain, step=rest[0])


def format(domain: Domain | str, resource_id: str | None, step: str) -> list[str]:
    """Build the canonical path segments for a flow position.

    A resource domain without an id can only address its first step, so any
    other step falls back to the domain root. Resource ids are ignored for
    resource-less domains.

    Raises:
        UnknownDomainError: If ``domain`` is not a booking domain
        ValueError: If ``step`` is not part of the domain's graph
    """
    domain = resolve_domain(domain)
    graph = STEP_GRAPHS[domain]
    if step not in graph:
        raise ValueError(f"step '{step}' is not part of the {domain.value} flow")

    if domain not in RESOURCE_DOMAINS:
        if step == graph[0]:
            return [domain.value]
        return [domain.value, step]

    if resource_id is None:
        return [domain.value]
    if step == RESOURCE_LANDING_STEP:
        return [domain.value, resource_id]
    return [domain.value, resource_id, step]


def to_path(
    domain: Domain | str,
    resource_id: str | None,
    step: str,
    criteria: Mapping[str, Any] | None = None,
) -> str:
    """Same as :func:`format`, joined into an absolute URL path.

    Hotel search ``criteria`` are appended as a query string; other domains
    ignore them.
    """
    path = "/" + "/".join(format(domain, resource_id, step))
    if criteria and resolve_domain(domain) is Domain.HOTEL:
        query = criteria_query(criteria)
        if query:
            path = f"{path}?{query}"
    return path


# Hotel search criteria carried in the query string of step URLs
CRITERIA_QUERY_KEYS = {
    "location": "location",
    "check_in": "checkIn",
    "check_out": "checkOut",
    "rooms": "rooms",
    "adults": "adults",
    "children": "children",
}
CRITERIA_REQUIRED = ("location", "check_in", "check_out")
CRITERIA_DEFAULTS = {"rooms": 1, "adults": 1, "children": 0}


def criteria_query(criteria: Mapping[str, Any]) -> str:
    """Encode the known search criteria fields as a query string."""
    params = {}
    for field, param in CRITERIA_QUERY_KEYS.items():
        value = criteria.get(field)
        if value is None:
            continue
        params[param] = value.isoformat() if isinstance(value, date) else str(value)
    return urlencode(params)


def _parse_moment(value: str) -> date:
    if len(value) == 10:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value)


def parse_criteria(query: str | Mapping[str, str]) -> dict[str, Any] | None:
    """Read hotel search criteria back from a URL or query string.

    Location and both dates are required; rooms, adults and children default
    to 1, 1 and 0. Like :func:`parse`, this never raises.

    Returns:
        The criteria dict, or None when required fields are missing or malformed
    """
    if isinstance(query, str):
        query = query.split("#", 1)[0]
        if "?" in query:
            query = query.split("?", 1)[1]
        elif "/" in query:
            # A path without a query string
            query = ""
        params = {key: values[0] for key, values in parse_qs(query).items()}
    else:
        params = dict(query)

    if not all(params.get(CRITERIA_QUERY_KEYS[field]) for field in CRITERIA_REQUIRED):
        return None

    try:
        criteria: dict[str, Any] = {
            "location": params["location"],
            "check_in": _parse_moment(params["checkIn"]),
            "check_out": _parse_moment(params["checkOut"]),
        }
        for field, default in CRITERIA_DEFAULTS.items():
            raw = params.get(CRITERIA_QUERY_KEYS[field])
            criteria[field] = int(raw) if raw else default
    except (ValueError, TypeError):
        return None
    return criteria
