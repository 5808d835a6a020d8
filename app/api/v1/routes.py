"""Route guard and URL mapping endpoints for storefront page guards."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_flow_session
from app.core.codec import encode
from app.core.exceptions import ValidationError
from app.domain import routes
from app.domain.steps import Domain, resolve_domain
from app.schemas.api import RouteDecisionResponse, RouteFormatResponse
from app.services.flow_engine import FlowSession
from app.services.route_guard import RouteGuard

router = APIRouter()


@router.get("/resolve", response_model=RouteDecisionResponse)
def resolve_route(
    session: Annotated[FlowSession, Depends(get_flow_session)],
    path: str = Query(..., min_length=1, max_length=512),
) -> RouteDecisionResponse:
    """Decide whether the page at ``path`` may render or must redirect.

    Hotel URLs also report the search criteria found in their query string.
    """
    decision = RouteGuard(session).check(path)
    match = decision.match
    criteria = None
    if match is not None and match.domain is Domain.HOTEL:
        criteria = routes.parse_criteria(path)
    return RouteDecisionResponse(
        path=path,
        allowed=decision.allowed,
        redirect_to=decision.redirect_to,
        reason=decision.reason,
        domain=match.domain if match else None,
        resource_id=match.resource_id if match else None,
        step=match.step if match else None,
        criteria=encode(criteria) if criteria else None,
    )


@router.get("/format", response_model=RouteFormatResponse)
def format_route(
    domain: str,
    step: str,
    resource_id: str | None = None,
    location: str | None = None,
    check_in: date | None = None,
    check_out: date | None = None,
    rooms: int | None = Query(None, ge=1),
    adults: int | None = Query(None, ge=1),
    children: int | None = Query(None, ge=0),
) -> RouteFormatResponse:
    """Build the canonical URL of a flow position.

    Search criteria parameters are carried in the query string of hotel URLs.
    """
    flow_domain = resolve_domain(domain)
    if resource_id is not None and not routes.is_valid_resource_id(resource_id):
        raise ValidationError(f"Invalid resource id '{resource_id}'")
    criteria = {
        "location": location,
        "check_in": check_in,
        "check_out": check_out,
        "rooms": rooms,
        "adults": adults,
        "children": children,
    }
    try:
        segments = routes.format(flow_domain, resource_id, step)
        path = routes.to_path(flow_domain, resource_id, step, criteria=criteria)
    except ValueError as e:
        raise ValidationError(str(e))

    return RouteFormatResponse(
        domain=flow_domain,
        resource_id=resource_id,
        step=step,
        segments=segments,
        path=path,
        query=path.partition("?")[2],
    )
