"""Tests for the MUFG Intime token/session checker."""

import pytest
import requests

from ipo_data_hub.config.registrars import load_registrar_profiles
from ipo_data_hub.domain.allotment.models import RegistrarId, StatusKind
from ipo_data_hub.infrastructure.factory import build_listing_sources
from ipo_data_hub.infrastructure.resolution import IdentifierResolver
from ipo_data_hub.io.connectors.registrars.checkers import MufgChecker

PAN = "ABCDE1234F"
BASE = "https://in.mpms.mufg.com/Initial_Offer/IPO.aspx"
TOKEN_URL = f"{BASE}/generateToken"
LISTING_URL = f"{BASE}/GetDetails"
SEARCH_URL = f"{BASE}/SearchOnPan"

LISTING = (
    "&lt;NewDataSet&gt;&lt;Table&gt;&lt;company_id&gt;11924&lt;/company_id&gt;"
    "&lt;companyname&gt;MIDWEST LIMITED&lt;/companyname&gt;&lt;/Table&gt;&lt;/NewDataSet&gt;"
)


def search_payload(allot: str) -> dict:
    return {
        "d": (
            "<NewDataSet><Table><NAME1>RAVI KUMAR</NAME1><PEMNDG>RII</PEMNDG>"
            f"<DPCLITID>1203320000000001</DPCLITID><SHARES>100</SHARES><ALLOT>{allot}</ALLOT>"
            "</Table><Table1><MSG>ok</MSG></Table1></NewDataSet>"
        )
    }


@pytest.fixture
def checker(transport):
    profiles = load_registrar_profiles()
    resolver = IdentifierResolver(build_listing_sources(profiles, transport))
    return MufgChecker(profiles[RegistrarId.MUFG], transport, resolver)


@pytest.fixture
def listing_routes(routes, respond):
    routes[("POST", TOKEN_URL)] = respond(json_body={"d": "tok-123"})
    routes[("POST", LISTING_URL)] = respond(json_body={"d": LISTING})
    return routes


class TestMufgChecker:
    def test_allotted(self, checker, listing_routes, respond, sessions):
        listing_routes[("POST", SEARCH_URL)] = respond(json_body=search_payload("50"))

        result = checker.check(PAN, "Midwest Limited")

        assert result.success is True
        assert result.status == StatusKind.ALLOTTED
        assert result.note == "Used company ID: 11924"
        assert result.details.applicant_name == "RAVI KUMAR"
        assert result.details.category == "RII"
        assert result.details.shares_applied == "100"
        assert result.details.allotment_status == "50 shares allotted"
        search_call = [call for call in sessions.calls if call[1] == SEARCH_URL][0]
        assert search_call[2]["json"] == {
            "clientid": "11924",
            "PAN": PAN,
            "IFSC": "",
            "CHKVAL": "1",
            "token": "tok-123",
        }

    def test_token_requested_before_listing(self, checker, listing_routes, respond, sessions):
        listing_routes[("POST", SEARCH_URL)] = respond(json_body=search_payload("0"))

        checker.check(PAN, "Midwest Limited")

        assert sessions.urls_called("POST") == [TOKEN_URL, LISTING_URL, SEARCH_URL]

    def test_zero_allotted(self, checker, listing_routes, respond):
        listing_routes[("POST", SEARCH_URL)] = respond(json_body=search_payload("0"))

        result = checker.check(PAN, "Midwest Limited")

        assert result.status == StatusKind.NOT_ALLOTTED
        assert result.details.allotment_status == "Not Allotted"
        assert result.details.status == "not allotted"

    def test_no_records(self, checker, listing_routes, respond):
        listing_routes[("POST", SEARCH_URL)] = respond(
            json_body={"d": "<NewDataSet><Table1><MSG>No record</MSG></Table1></NewDataSet>"}
        )
        assert checker.check(PAN, "Midwest Limited").status == StatusKind.NO_RECORD_FOUND

    def test_empty_envelope_is_unknown(self, checker, listing_routes, respond):
        listing_routes[("POST", SEARCH_URL)] = respond(json_body={"d": ""})
        assert checker.check(PAN, "11924").status == StatusKind.UNKNOWN

    def test_unknown_company_is_error_without_search(self, checker, listing_routes, sessions):
        result = checker.check(PAN, "Zenith Steel")

        assert result.success is False
        assert result.status == StatusKind.ERROR
        assert result.error == "No company found for IPO name: Zenith Steel"
        assert SEARCH_URL not in sessions.urls_called()

    def test_token_failure_sends_empty_token(self, checker, routes, respond, sessions):
        routes[("POST", TOKEN_URL)] = requests.ConnectionError("down")
        routes[("POST", SEARCH_URL)] = respond(json_body=search_payload("50"))

        result = checker.check(PAN, "11924")

        assert result.status == StatusKind.ALLOTTED
        assert result.note is None
        search_call = [call for call in sessions.calls if call[1] == SEARCH_URL][0]
        assert search_call[2]["json"]["token"] == ""
        assert LISTING_URL not in sessions.urls_called()

    def test_search_transport_failure(self, checker, listing_routes, respond):
        listing_routes[("POST", SEARCH_URL)] = respond(502)

        result = checker.check(PAN, "11924")

        assert result.status == StatusKind.ERROR
        assert result.registrar == "mufg"
