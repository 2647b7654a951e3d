"""
Identifier resolver: free-text IPO name -> registrar company code.

Resolution order per registrar:
1. The registrar's own ResolutionCache (positive and negative entries)
2. The registrar's ListingSource, candidate set by candidate set, through
   the matching ladder; the first match wins

The outcome, including a miss, is cached. ``resolve`` never raises for an
unreachable listing; a miss is ``None``.
"""

from typing import Callable, Dict, Mapping, Optional

from ipo_data_hub.domain.allotment.models import RegistrarId
from ipo_data_hub.io.connectors.registrars.models import RegistrarTransportError
from ipo_data_hub.utils.logging import get_logger

from .cache import ResolutionCache
from .matching import match_candidate, normalize_cache_key
from .sources import ListingSource

logger = get_logger(__name__)


class IdentifierResolver:
    """
    Resolves IPO names to company codes for registrars that need them.

    Args:
        sources: Listing source per registrar; registrars without one always
            resolve to None
        caches: Optional pre-built caches; any registrar with a source but no
            cache gets one from ``cache_factory``
        cache_factory: Builds a fresh ResolutionCache
    """

    def __init__(
        self,
        sources: Mapping[RegistrarId, ListingSource],
        caches: Optional[Mapping[RegistrarId, ResolutionCache]] = None,
        cache_factory: Callable[[], ResolutionCache] = ResolutionCache,
    ):
        self.sources: Dict[RegistrarId, ListingSource] = dict(sources)
        self.caches: Dict[RegistrarId, ResolutionCache] = dict(caches or {})
        for registrar_id in self.sources:
            if registrar_id not in self.caches:
                self.caches[registrar_id] = cache_factory()

    def resolve(self, registrar_id: RegistrarId, raw_name: str) -> Optional[str]:
        source = self.sources.get(registrar_id)
        key = normalize_cache_key(raw_name)
        if source is None or not key:
            return None

        cache = self.caches[registrar_id]
        entry = cache.get(key)
        if entry is not None:
            logger.debug(
                "resolver.cache_hit",
                registrar=registrar_id.value,
                ipo_name=key,
                company_id=entry.value,
            )
            return entry.value

        company_id = self._lookup(registrar_id, source, raw_name)
        cache.put(key, company_id)
        return company_id

    def _lookup(
        self, registrar_id: RegistrarId, source: ListingSource, raw_name: str
    ) -> Optional[str]:
        log = logger.bind(registrar=registrar_id.value, ipo_name=raw_name)
        try:
            for candidates in source.iter_candidate_sets():
                match = match_candidate(raw_name, candidates)
                if match is not None:
                    log.info(
                        "resolver.match_found",
                        company_id=match.value,
                        matched_label=match.label,
                    )
                    return match.value
        except RegistrarTransportError as e:
            log.warning("resolver.listing_unavailable", error=str(e))
            return None

        log.info("resolver.no_match")
        return None

    def cache_for(self, registrar_id: RegistrarId) -> Optional[ResolutionCache]:
        return self.caches.get(registrar_id)

    def _selected_caches(self, registrar_id: Optional[RegistrarId]):
        if registrar_id is None:
            return list(self.caches.items())
        cache = self.caches.get(registrar_id)
        return [(registrar_id, cache)] if cache is not None else []

    def clear_cache(self, registrar_id: Optional[RegistrarId] = None) -> None:
        for selected_id, cache in self._selected_caches(registrar_id):
            cache.clear()
            logger.info("resolver.cache_cleared", registrar=selected_id.value)

    def cleanup_cache(self, registrar_id: Optional[RegistrarId] = None) -> int:
        """Drop expired entries and enforce capacity; returns entries removed."""
        removed = 0
        for selected_id, cache in self._selected_caches(registrar_id):
            count = cache.evict_expired() + cache.evict_over_capacity()
            logger.info("resolver.cache_cleaned", registrar=selected_id.value, removed=count)
            removed += count
        return removed

    def cache_stats(self, registrar_id: RegistrarId) -> Dict[str, object]:
        cache = self.caches.get(registrar_id)
        if cache is None:
            return {"size": 0, "entries": []}
        return cache.stats()
