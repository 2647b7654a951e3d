"""
Company-name matching ladder used by the identifier resolver.

Registrar listings spell company names inconsistently ("Midwest Limited",
"MIDWEST LTD", "Midwest"), so a free-text IPO name is matched against the
candidate labels through increasingly loose rungs:

1. exact equality
2. substring containment, either direction
3. containment after stripping corporate suffixes
4. token overlap of at least half the query tokens

Each rung is evaluated across every candidate before the next rung is tried,
so a looser rung never shadows a stricter match further down the list.
"""

import re
from typing import Callable, List, NamedTuple, Optional, Sequence

CORPORATE_SUFFIX_RE = re.compile(
    r"\b(limited|ltd|pvt|private|company|corp|corporation|inc|incorporated)\b"
)
TOKEN_MIN_LENGTH = 3
TOKEN_OVERLAP_THRESHOLD = 0.5

_WHITESPACE_RE = re.compile(r"\s+")


class ListingCandidate(NamedTuple):
    """One selectable company in a registrar listing."""

    label: str
    value: str


def normalize_cache_key(raw_name: str) -> str:
    return (raw_name or "").strip().lower()


def _clean(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", (text or "").strip().lower())


def strip_corporate_suffixes(text: str) -> str:
    """Remove suffix words such as "limited" or "pvt" and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", CORPORATE_SUFFIX_RE.sub("", _clean(text))).strip()


def _tokens(text: str) -> List[str]:
    return [token for token in text.split() if len(token) >= TOKEN_MIN_LENGTH]


def _exact(query: str, label: str) -> bool:
    return query == label


def _contains(query: str, label: str) -> bool:
    return query in label or label in query


def _suffix_stripped(query: str, label: str) -> bool:
    return _contains(strip_corporate_suffixes(query), strip_corporate_suffixes(label))


def token_overlap(query: str, label: str) -> float:
    """Share of query tokens that contain, or are contained in, some label token."""
    query_tokens = _tokens(strip_corporate_suffixes(query))
    label_tokens = _tokens(strip_corporate_suffixes(label))
    if not query_tokens or not label_tokens:
        return 0.0
    matched = sum(
        1
        for query_token in query_tokens
        if any(query_token in label_token or label_token in query_token for label_token in label_tokens)
    )
    return matched / len(query_tokens)


def _token_overlap(query: str, label: str) -> bool:
    return token_overlap(query, label) >= TOKEN_OVERLAP_THRESHOLD


MATCH_RUNGS: Sequence[Callable[[str, str], bool]] = (
    _exact,
    _contains,
    _suffix_stripped,
    _token_overlap,
)


def _usable(query: str, label: str, rung: Callable[[str, str], bool]) -> bool:
    # An empty side would "contain" everything; such pairs never match
    if rung is _suffix_stripped:
        return bool(strip_corporate_suffixes(query)) and bool(strip_corporate_suffixes(label))
    return bool(query) and bool(label)


def match_candidate(
    query: str, candidates: Sequence[ListingCandidate]
) -> Optional[ListingCandidate]:
    """
    Return the first candidate matched by the strictest successful rung.

    Args:
        query: Free-text IPO name
        candidates: Listing entries in page order

    Returns:
        Matching candidate, or None when no rung matches
    """
    cleaned_query = _clean(query)
    if not cleaned_query:
        return None
    cleaned = [(candidate, _clean(candidate.label)) for candidate in candidates]
    for rung in MATCH_RUNGS:
        for candidate, label in cleaned:
            if _usable(cleaned_query, label, rung) and rung(cleaned_query, label):
                return candidate
    return None
