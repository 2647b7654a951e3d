"""Tests for the allotment service wiring."""

from dataclasses import replace

import pytest
import requests

from ipo_data_hub.config.registrars import RegistrarConfigError, load_registrar_profiles
from ipo_data_hub.config.settings import Settings
from ipo_data_hub.domain.allotment.models import RegistrarId, StatusKind
from ipo_data_hub.infrastructure.factory import build_allotment_service, build_listing_sources
from ipo_data_hub.infrastructure.resolution import MufgCompanyListSource, SelectOptionsSource
from ipo_data_hub.io.connectors.registrars.checkers import (
    BigshareChecker,
    GenericChecker,
    KfintechChecker,
    LinkIntimeChecker,
    MufgChecker,
    ScrapedFormChecker,
)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        resolution_cache_ttl_hours=2,
        resolution_cache_max_entries=50,
        registrar_overrides_file=str(tmp_path / "absent.yml"),
    )


class TestBuildAllotmentService:
    def test_every_registrar_has_a_checker(self, settings, transport):
        service = build_allotment_service(settings, transport=transport)
        checkers = service.dispatcher.checkers

        assert set(checkers) == set(RegistrarId)
        assert isinstance(checkers[RegistrarId.BIGSHARE], BigshareChecker)
        assert isinstance(checkers[RegistrarId.KFINTECH], KfintechChecker)
        assert isinstance(checkers[RegistrarId.LINKINTIME], LinkIntimeChecker)
        assert isinstance(checkers[RegistrarId.MUFG], MufgChecker)
        for registrar_id in (RegistrarId.SKYLINE, RegistrarId.CAMEO, RegistrarId.MAS, RegistrarId.PURVA):
            assert isinstance(checkers[registrar_id], ScrapedFormChecker)
        for registrar_id in (RegistrarId.MAASHITLA, RegistrarId.BEETAL):
            assert isinstance(checkers[registrar_id], GenericChecker)

    def test_order_follows_profile_table(self, settings, transport):
        service = build_allotment_service(settings, transport=transport)
        assert service.dispatcher.order == list(RegistrarId)
        assert [p.registrar_id for p in service.list_supported_registrars()] == list(RegistrarId)

    def test_caches_use_settings(self, settings, transport):
        service = build_allotment_service(settings, transport=transport)
        cache = service.resolver.cache_for(RegistrarId.MUFG)

        assert cache.ttl_seconds == 7200
        assert cache.max_entries == 50
        assert service.resolver.cache_for(RegistrarId.BIGSHARE) is not cache
        assert service.resolver.cache_for(RegistrarId.KFINTECH) is None

    def test_checkers_share_one_resolver(self, settings, transport):
        service = build_allotment_service(settings, transport=transport)
        checkers = service.dispatcher.checkers

        assert checkers[RegistrarId.BIGSHARE].resolver is service.resolver
        assert checkers[RegistrarId.MUFG].resolver is service.resolver

    def test_invalid_override_file_fails_fast(self, tmp_path, transport):
        override_file = tmp_path / "registrars.yml"
        override_file.write_text("acme:\n  base_url: https://x\n", encoding="utf-8")
        settings = Settings(_env_file=None, registrar_overrides_file=str(override_file))

        with pytest.raises(RegistrarConfigError):
            build_allotment_service(settings, transport=transport)


class TestBuildListingSources:
    def test_sources_follow_overridden_base_urls(self, transport):
        profiles = load_registrar_profiles()
        profiles[RegistrarId.BIGSHARE] = replace(
            profiles[RegistrarId.BIGSHARE], base_url="https://bigshare.mirror"
        )
        profiles[RegistrarId.MUFG] = replace(profiles[RegistrarId.MUFG], base_url="https://mufg.mirror")

        sources = build_listing_sources(profiles, transport)

        assert set(sources) == {RegistrarId.BIGSHARE, RegistrarId.MUFG}
        assert isinstance(sources[RegistrarId.BIGSHARE], SelectOptionsSource)
        assert sources[RegistrarId.BIGSHARE].urls == (
            "https://bigshare.mirror/",
            "https://bigshare.mirror/Default.aspx",
        )
        assert isinstance(sources[RegistrarId.MUFG], MufgCompanyListSource)
        assert sources[RegistrarId.MUFG].url == "https://mufg.mirror/Initial_Offer/IPO.aspx/GetDetails"


class TestWiredService:
    BIGSHARE_LISTING = "https://ipo.bigshareonline.com/"
    BIGSHARE_URL = "https://ipo.bigshareonline.com/Data.aspx/FetchIpodetails"
    KFINTECH_URL = "https://ris.kfintech.com/ipostatus/api/ipoapplicationstatus"
    LINKINTIME_URL = "https://ipoallotment.linkintime.co.in/public-issues/ipostatus"

    def test_bigshare_end_to_end(self, settings, transport, routes, respond):
        routes[("GET", self.BIGSHARE_LISTING)] = respond(
            text='<select id="ddlCompany"><option value="42">Midwest Limited</option></select>'
        )
        routes[("POST", self.BIGSHARE_URL)] = respond(
            json_body={"d": {"APPLICATION_NO": "1", "APPLIED": "100", "ALLOTED": "Allotted 50 shares"}}
        )
        service = build_allotment_service(settings, transport=transport)

        payload = service.check_allotment("ABCDE1234F", "Midwest Limited", "bigshare").to_public_dict()

        assert payload["success"] is True
        assert payload["registrar"] == "bigshare"
        assert payload["status"] == "Allotted"
        assert payload["details"]["sharesApplied"] == "100"
        assert payload["details"]["status"] == "allotted"

    def test_timeout_fails_only_that_registrar(self, settings, transport, routes, respond):
        routes[("POST", self.KFINTECH_URL)] = requests.Timeout("hung")
        routes[("POST", self.LINKINTIME_URL)] = respond(json_body={"status": "Allotted"})
        service = build_allotment_service(settings, transport=transport)

        results = service.check_allotment("ABCDE1234F", "Midwest Limited")

        assert [result.registrar for result in results] == [r.value for r in RegistrarId]
        by_registrar = {result.registrar: result for result in results}
        assert by_registrar["kfintech"].status == StatusKind.ERROR
        assert "Timed out" in by_registrar["kfintech"].error
        assert by_registrar["linkintime"].status == StatusKind.ALLOTTED
        assert all(result.status in StatusKind for result in results)
