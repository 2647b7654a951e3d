"""Tests for log sanitization of secrets and PAN numbers."""

import pytest

from ipo_data_hub.io.connectors.registrars.utils import sanitize_url_for_logging
from ipo_data_hub.utils.logging import REDACTED_VALUE, mask_pan, sanitize_for_logging


class TestMaskPan:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("ABCDE1234F", "ABCDE****F"),
            ("ABCDE1234", "ABCDE***4"),
            ("ABC", "ABC"),
            (None, None),
        ],
    )
    def test_mask_pan(self, value, expected):
        assert mask_pan(value) == expected

    def test_mask_pan_list(self):
        assert mask_pan(["ABCDE1234F", "PQRST6789Z"]) == ["ABCDE****F", "PQRST****Z"]


class TestSanitizeForLogging:
    def test_secrets_redacted_and_pans_masked(self):
        sanitized = sanitize_for_logging(
            {
                "token": "abc",
                "__VIEWSTATE": "xyz",
                "pan": "ABCDE1234F",
                "pancard": "PQRST6789Z",
                "registrar": "mufg",
            }
        )

        assert sanitized == {
            "token": REDACTED_VALUE,
            "__VIEWSTATE": REDACTED_VALUE,
            "pan": "ABCDE****F",
            "pancard": "PQRST****Z",
            "registrar": "mufg",
        }

    def test_nested_dicts(self):
        sanitized = sanitize_for_logging({"request": {"PAN": "ABCDE1234F", "ipo": "Midwest"}})
        assert sanitized == {"request": {"PAN": "ABCDE****F", "ipo": "Midwest"}}

    def test_input_not_mutated(self):
        data = {"pan": "ABCDE1234F"}
        sanitize_for_logging(data)
        assert data == {"pan": "ABCDE1234F"}


class TestSanitizeUrl:
    def test_pan_in_query_masked(self):
        assert (
            sanitize_url_for_logging("https://r.test/s?pan=ABCDE1234F&ipo=1")
            == "https://r.test/s?pan=ABCDE****F&ipo=1"
        )

    def test_token_dropped(self):
        assert sanitize_url_for_logging("https://r.test/s?token=abc123") == "https://r.test/s?[TOKEN_SANITIZED]"

    def test_pans_in_free_text_masked(self):
        sanitized = sanitize_for_logging({"error": "HTTP 500 from https://r.test/s?pan=ABCDE1234F"})
        assert sanitized == {"error": "HTTP 500 from https://r.test/s?pan=ABCDE****F"}
