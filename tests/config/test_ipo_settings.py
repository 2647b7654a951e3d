"""Unit tests for environment-driven settings.

Tests verify:
- Defaults for transport and resolution caches
- IDH_ prefixed environment overrides
- Validation of non-positive values
- Singleton pattern behavior
"""

import pytest
from pydantic import ValidationError

from ipo_data_hub.config.settings import DEFAULT_USER_AGENT, Settings, get_settings


@pytest.mark.unit
def test_defaults(monkeypatch):
    """Defaults match the registrar transport and cache contract."""
    for name in ("IDH_HTTP_TIMEOUT", "IDH_RESOLUTION_CACHE_TTL_HOURS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.http_timeout == 30
    assert settings.http_retry_max == 0
    assert settings.http_user_agent == DEFAULT_USER_AGENT
    assert settings.resolution_cache_ttl_seconds == 24 * 3600
    assert settings.resolution_cache_max_entries == 1000
    assert settings.aggregator_base_url.startswith("https://")
    assert settings.LOG_LEVEL == "INFO"


@pytest.mark.unit
def test_prefixed_environment_overrides(monkeypatch):
    monkeypatch.setenv("IDH_HTTP_TIMEOUT", "12")
    monkeypatch.setenv("IDH_RESOLUTION_CACHE_TTL_HOURS", "2")
    monkeypatch.setenv("IDH_REGISTRAR_OVERRIDES_FILE", "/tmp/registrars.yml")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings(_env_file=None)

    assert settings.http_timeout == 12
    assert settings.resolution_cache_ttl_seconds == 7200
    assert settings.registrar_overrides_file == "/tmp/registrars.yml"
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.unit
@pytest.mark.parametrize(
    "name,value",
    [
        ("IDH_HTTP_TIMEOUT", "0"),
        ("IDH_RESOLUTION_CACHE_MAX_ENTRIES", "-1"),
        ("IDH_HTTP_RETRY_MAX", "-2"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.unit
def test_get_settings_is_cached():
    assert get_settings() is get_settings()
