"""Unit tests for the registrar profile table and YAML overrides."""

import pytest

from ipo_data_hub.config.registrars import (
    DEFAULT_PROFILES,
    RegistrarConfigError,
    apply_overrides,
    load_registrar_profiles,
)
from ipo_data_hub.domain.allotment.models import RegistrarId


@pytest.mark.unit
def test_defaults_cover_every_registrar_in_order():
    profiles = load_registrar_profiles()
    assert list(profiles) == list(RegistrarId)
    assert profiles[RegistrarId.BIGSHARE].url == "https://ipo.bigshareonline.com/Data.aspx/FetchIpodetails"
    assert profiles[RegistrarId.MUFG].requires_company_code is True
    assert profiles[RegistrarId.KFINTECH].requires_company_code is False


@pytest.mark.unit
def test_profile_to_dict_uses_public_keys():
    payload = DEFAULT_PROFILES[RegistrarId.SKYLINE].to_dict()
    assert payload["id"] == "skyline"
    assert payload["responseType"] == "html"
    assert payload["method"] == "GET"


@pytest.mark.unit
def test_missing_override_file_keeps_defaults(tmp_path):
    profiles = load_registrar_profiles(tmp_path / "absent.yml")
    assert profiles[RegistrarId.MUFG] == DEFAULT_PROFILES[RegistrarId.MUFG]


@pytest.mark.unit
def test_override_file_applied(tmp_path):
    override_file = tmp_path / "registrars.yml"
    override_file.write_text(
        "mufg:\n  base_url: https://mirror.example\nskyline:\n  method: post\n",
        encoding="utf-8",
    )

    profiles = load_registrar_profiles(override_file)

    assert profiles[RegistrarId.MUFG].url == "https://mirror.example/Initial_Offer/IPO.aspx/SearchOnPan"
    assert profiles[RegistrarId.SKYLINE].method == "POST"
    assert profiles[RegistrarId.BIGSHARE] == DEFAULT_PROFILES[RegistrarId.BIGSHARE]


@pytest.mark.unit
def test_invalid_yaml_fails_fast(tmp_path):
    override_file = tmp_path / "registrars.yml"
    override_file.write_text("mufg: [unclosed\n", encoding="utf-8")

    with pytest.raises(RegistrarConfigError, match="Invalid YAML"):
        load_registrar_profiles(override_file)


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"acme": {"base_url": "https://x"}}, "Unknown registrar"),
        ({"mufg": {"timeout": 3}}, "Unsupported override fields"),
        ({"mufg": {"method": "PUT"}}, "Unsupported method"),
        ({"mufg": "https://x"}, "must be a mapping"),
    ],
)
def test_invalid_overrides_rejected(overrides, message):
    with pytest.raises(RegistrarConfigError, match=message):
        apply_overrides(DEFAULT_PROFILES, overrides)
