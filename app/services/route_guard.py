"""Route guard for checkout pages.

Decides whether a visitor landing on a URL may see that step or should be
redirected. Only data gates and the one-step-forward rule are checked here;
whether a hotel or car id exists in inventory is the caller's concern.
"""

import logging
from dataclasses import dataclass

from app.domain import routes
from app.domain.gates import first_unmet_step
from app.domain.navigation import is_accessible, previous_step
from app.domain.routes import RouteMatch
from app.domain.steps import first_step
from app.services.flow_engine import FlowSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of a route check."""

    allowed: bool
    redirect_to: str | None = None
    reason: str | None = None
    match: RouteMatch | None = None


class RouteGuard:
    """Check URLs against the session's stored flow states."""

    def __init__(self, session: FlowSession) -> None:
        self.session = session

    def check(self, path: str) -> GuardDecision:
        """Check whether ``path`` may be rendered.

        Args:
            path: URL path the visitor requested

        Returns:
            GuardDecision: allowed, or the URL to redirect to and why
        """
        match = routes.parse(path)
        if match is None:
            return GuardDecision(allowed=True, reason="not a checkout route")

        engine = self.session.engine(match.domain)
        state = engine.get()
        graph = engine.graph

        blocked = first_unmet_step(match.domain, match.step, state)
        if blocked is not None:
            # Send the visitor back to where the missing data is collected
            fallback = previous_step(blocked, graph) or first_step(match.domain)
            redirect = self._url(match, fallback)
            logger.info(
                f"Guard redirect {path} → {redirect}: data for '{blocked}' missing "
                f"(session {self.session.session_id})"
            )
            return GuardDecision(
                allowed=False,
                redirect_to=redirect,
                reason=f"please complete the step before '{blocked}'",
                match=match,
            )

        if not is_accessible(match.step, state.step, graph):
            redirect = self._url(match, state.step)
            logger.info(
                f"Guard redirect {path} → {redirect}: cannot skip ahead from '{state.step}' "
                f"(session {self.session.session_id})"
            )
            return GuardDecision(
                allowed=False,
                redirect_to=redirect,
                reason=f"cannot skip ahead from '{state.step}' to '{match.step}'",
                match=match,
            )

        return GuardDecision(allowed=True, match=match)

    @staticmethod
    def _url(match: RouteMatch, step: str) -> str:
        # The first step of a resource domain is the resource-less search page
        resource_id = None if step == first_step(match.domain) else match.resource_id
        return routes.to_path(match.domain, resource_id, step)
