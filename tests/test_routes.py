"""Tests for URL path mapping."""

from datetime import UTC, date, datetime

import pytest

from app.core.exceptions import UnknownDomainError
from app.domain import routes
from app.domain.routes import RouteMatch
from app.domain.steps import RESOURCE_DOMAINS, STEP_GRAPHS, Domain


def _valid_positions():
    for domain, graph in STEP_GRAPHS.items():
        for step in graph:
            if domain in RESOURCE_DOMAINS:
                yield domain, "h-12_a", step
            else:
                yield domain, None, step


@pytest.mark.parametrize("domain,resource_id,step", list(_valid_positions()))
def test_format_then_parse_round_trips(domain, resource_id, step):
    match = routes.parse(routes.format(domain, resource_id, step))

    assert match == RouteMatch(domain=domain, step=step, resource_id=resource_id)


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/hotels", RouteMatch(Domain.HOTEL, "search")),
        ("/hotels/h1", RouteMatch(Domain.HOTEL, "details", "h1")),
        ("/hotels/h1/guests", RouteMatch(Domain.HOTEL, "guests", "h1")),
        ("/car-hire/c9/contact/", RouteMatch(Domain.CAR_HIRE, "contact", "c9")),
        ("/visa-application", RouteMatch(Domain.VISA, "start")),
        ("/visa-application/appointment", RouteMatch(Domain.VISA, "appointment")),
        ("/travel-insurance/travelers?plan=basic", RouteMatch(Domain.INSURANCE, "travelers")),
        ("hotels/h1/payment#summary", RouteMatch(Domain.HOTEL, "payment", "h1")),
    ],
)
def test_parse(path, expected):
    assert routes.parse(path) == expected


@pytest.mark.parametrize(
    "path",
    [
        "",
        "/",
        "/account",
        "/hotels/h1/contact",
        "/hotels/h1/guests/extra",
        "/hotels/h%201",
        "/visa-application/guests",
        "/visa-application/start/again",
        "/travel-insurance/plans/extra",
    ],
)
def test_unmappable_paths_parse_to_none(path):
    assert routes.parse(path) is None


def test_parse_accepts_segments():
    assert routes.parse(["car-hire", "c1", "payment"]) == RouteMatch(Domain.CAR_HIRE, "payment", "c1")
    assert routes.parse([]) is None


def test_format_canonical_forms():
    assert routes.format(Domain.HOTEL, "h1", "details") == ["hotels", "h1"]
    assert routes.format(Domain.HOTEL, "h1", "payment") == ["hotels", "h1", "payment"]
    assert routes.format("visa-application", None, "start") == ["visa-application"]
    assert routes.format("travel-insurance", None, "review") == ["travel-insurance", "review"]


def test_format_without_resource_falls_back_to_domain_root():
    assert routes.format(Domain.CAR_HIRE, None, "payment") == ["car-hire"]


def test_format_ignores_resource_for_resource_less_domains():
    assert routes.format(Domain.VISA, "ignored", "review") == ["visa-application", "review"]


def test_format_rejects_unknown_step():
    with pytest.raises(ValueError):
        routes.format(Domain.HOTEL, "h1", "contact")


def test_format_rejects_unknown_domain():
    with pytest.raises(UnknownDomainError):
        routes.format("cruises", None, "search")


def test_to_path():
    assert routes.to_path(Domain.HOTEL, "h1", "guests") == "/hotels/h1/guests"
    assert routes.to_path(Domain.INSURANCE, None, "plans") == "/travel-insurance"


@pytest.mark.parametrize("resource_id,valid", [("h1", True), ("A_b-9", True), ("h 1", False), ("", False), ("h/1", False)])
def test_resource_id_pattern(resource_id, valid):
    assert routes.is_valid_resource_id(resource_id) is valid


class TestSearchCriteriaQuery:
    CRITERIA = {
        "location": "Lisbon, PT",
        "check_in": date(2026, 11, 2),
        "check_out": date(2026, 11, 5),
        "rooms": 2,
        "adults": 3,
        "children": 1,
    }

    @pytest.mark.parametrize("step", ["details", "guests", "payment"])
    def test_hotel_step_urls_round_trip(self, step):
        path = routes.to_path(Domain.HOTEL, "h1", step, criteria=self.CRITERIA)

        assert routes.parse(path) == RouteMatch(Domain.HOTEL, step, "h1")
        assert routes.parse_criteria(path) == self.CRITERIA

    def test_query_uses_storefront_parameter_names(self):
        path = routes.to_path(Domain.HOTEL, "h1", "guests", criteria=self.CRITERIA)

        assert path.startswith("/hotels/h1/guests?")
        query = path.partition("?")[2]
        assert "checkIn=2026-11-02" in query
        assert "checkOut=2026-11-05" in query
        assert "location=Lisbon%2C+PT" in query

    def test_datetimes_round_trip(self):
        criteria = {
            **self.CRITERIA,
            "check_in": datetime(2026, 11, 2, 15, tzinfo=UTC),
            "check_out": datetime(2026, 11, 5, 11, tzinfo=UTC),
        }

        assert routes.parse_criteria(routes.criteria_query(criteria)) == criteria

    def test_counts_default_when_missing(self):
        query = "location=Porto&checkIn=2026-11-02&checkOut=2026-11-05"

        assert routes.parse_criteria(query) == {
            "location": "Porto",
            "check_in": date(2026, 11, 2),
            "check_out": date(2026, 11, 5),
            "rooms": 1,
            "adults": 1,
            "children": 0,
        }

    @pytest.mark.parametrize(
        "query",
        [
            "",
            "/hotels/h1/guests",
            "checkIn=2026-11-02&checkOut=2026-11-05",
            "location=Porto&checkOut=2026-11-05",
            "location=Porto&checkIn=&checkOut=2026-11-05",
            "location=Porto&checkIn=tomorrow&checkOut=2026-11-05",
            "location=Porto&checkIn=2026-11-02&checkOut=2026-11-05&rooms=two",
        ],
    )
    def test_incomplete_or_malformed_query_gives_none(self, query):
        assert routes.parse_criteria(query) is None

    def test_mapping_input(self):
        params = {"location": "Porto", "checkIn": "2026-11-02", "checkOut": "2026-11-05", "adults": "2"}

        assert routes.parse_criteria(params)["adults"] == 2

    def test_other_domains_ignore_criteria(self):
        assert routes.to_path(Domain.CAR_HIRE, "c1", "payment", criteria=self.CRITERIA) == "/car-hire/c1/payment"

    def test_no_criteria_no_query(self):
        assert routes.to_path(Domain.HOTEL, "h1", "guests", criteria={}) == "/hotels/h1/guests"
