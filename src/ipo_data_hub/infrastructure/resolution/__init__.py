"""
Identifier resolution package.

Maps free-text IPO names onto registrar company codes using per-registrar
listing sources, a shared matching ladder and per-registrar TTL caches.
"""

from .cache import CacheEntry, ResolutionCache
from .matching import ListingCandidate, match_candidate
from .resolver import IdentifierResolver
from .sources import ListingSource, MufgCompanyListSource, SelectOptionsSource

__all__ = [
    "CacheEntry",
    "IdentifierResolver",
    "ListingCandidate",
    "ListingSource",
    "MufgCompanyListSource",
    "ResolutionCache",
    "SelectOptionsSource",
    "match_candidate",
]
