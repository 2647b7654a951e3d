"""Tests for the company-name matching ladder."""

import pytest

from ipo_data_hub.infrastructure.resolution.matching import (
    ListingCandidate,
    match_candidate,
    normalize_cache_key,
    strip_corporate_suffixes,
    token_overlap,
)


def _candidates(*labels):
    return [ListingCandidate(label, str(index)) for index, label in enumerate(labels, start=1)]


class TestHelpers:
    def test_normalize_cache_key(self):
        assert normalize_cache_key("  Midwest LIMITED ") == "midwest limited"
        assert normalize_cache_key(None) == ""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Midwest Limited", "midwest"),
            ("ACME PVT LTD", "acme"),
            ("Globe  Corporation  Inc", "globe"),
            ("Limitedless Ventures", "limitedless ventures"),
        ],
    )
    def test_strip_corporate_suffixes(self, text, expected):
        assert strip_corporate_suffixes(text) == expected

    def test_token_overlap_ignores_short_tokens(self):
        assert token_overlap("ab solar energy", "solar power") == 0.5
        assert token_overlap("ab", "ab") == 0.0


class TestMatchCandidate:
    def test_exact_match(self):
        candidates = _candidates("Midwest Limited", "Midwest")
        assert match_candidate("midwest", candidates).value == "2"

    def test_containment_either_direction(self):
        candidates = _candidates("Other Ltd", "Midwest Limited IPO")
        assert match_candidate("Midwest Limited", candidates).value == "2"
        assert match_candidate("Midwest Limited SME IPO 2025", _candidates("Midwest Limited")).value == "1"

    def test_suffix_stripped_match(self):
        candidates = _candidates("MIDWEST LTD")
        assert match_candidate("Midwest Limited", candidates).value == "1"

    def test_token_overlap_match(self):
        candidates = _candidates("Sunrise Green Energy Solutions")
        assert match_candidate("Green Energy Infra", candidates).value == "1"

    def test_strict_rung_wins_over_earlier_loose_candidate(self):
        candidates = _candidates("Alpha Green Energy", "Green Energy")
        assert match_candidate("Green Energy", candidates).value == "2"

    def test_first_candidate_wins_within_a_rung(self):
        candidates = _candidates("Midwest Limited A", "Midwest Limited B")
        assert match_candidate("Midwest", candidates).value == "1"

    def test_no_match(self):
        assert match_candidate("Zenith Steel", _candidates("Midwest Limited")) is None

    def test_empty_query_never_matches(self):
        assert match_candidate("   ", _candidates("Midwest")) is None

    def test_suffix_only_label_is_not_a_wildcard(self):
        candidates = _candidates("Limited", "Midwest Limited")
        assert match_candidate("Midwest Ltd", candidates).value == "2"

    def test_listing_name_with_suffix(self):
        assert match_candidate("ABC Industries", _candidates("ABC Industries Limited")).value == "1"

    def test_unrelated_names(self):
        assert match_candidate("Totally Different Co", _candidates("XYZ Corp")) is None
