"""
Dependency wiring for the allotment service.

Builds the process-wide object graph once: transport, per-registrar caches
and listing sources, resolver, checkers, dispatcher and service.
"""

import logging
from typing import Dict, Mapping, Optional

from ipo_data_hub.config.registrars import RegistrarProfile, load_registrar_profiles
from ipo_data_hub.config.settings import Settings, get_settings
from ipo_data_hub.domain.allotment.dispatcher import AllotmentChecker, AllotmentDispatcher
from ipo_data_hub.domain.allotment.models import RegistrarId
from ipo_data_hub.domain.allotment.service import AllotmentService
from ipo_data_hub.infrastructure.resolution import (
    IdentifierResolver,
    ListingSource,
    MufgCompanyListSource,
    ResolutionCache,
    SelectOptionsSource,
)
from ipo_data_hub.infrastructure.resolution.sources import listing_urls
from ipo_data_hub.io.connectors.registrars.checkers import (
    FORM_LAYOUTS,
    BigshareChecker,
    GenericChecker,
    KfintechChecker,
    LinkIntimeChecker,
    MufgChecker,
    ScrapedFormChecker,
)
from ipo_data_hub.io.connectors.registrars.transport import RegistrarTransport

logger = logging.getLogger(__name__)


def build_listing_sources(
    profiles: Mapping[RegistrarId, RegistrarProfile], transport: RegistrarTransport
) -> Dict[RegistrarId, ListingSource]:
    """Listing sources for the registrars that need a company code."""
    return {
        RegistrarId.BIGSHARE: SelectOptionsSource(
            transport, urls=listing_urls(profiles[RegistrarId.BIGSHARE].base_url)
        ),
        RegistrarId.MUFG: MufgCompanyListSource(transport, profiles[RegistrarId.MUFG].base_url),
    }


def build_checkers(
    profiles: Mapping[RegistrarId, RegistrarProfile],
    transport: RegistrarTransport,
    resolver: IdentifierResolver,
) -> Dict[RegistrarId, AllotmentChecker]:
    checkers: Dict[RegistrarId, AllotmentChecker] = {
        RegistrarId.BIGSHARE: BigshareChecker(profiles[RegistrarId.BIGSHARE], transport, resolver),
        RegistrarId.KFINTECH: KfintechChecker(profiles[RegistrarId.KFINTECH], transport),
        RegistrarId.LINKINTIME: LinkIntimeChecker(profiles[RegistrarId.LINKINTIME], transport),
        RegistrarId.MUFG: MufgChecker(profiles[RegistrarId.MUFG], transport, resolver),
    }
    for registrar_id in FORM_LAYOUTS:
        checkers[registrar_id] = ScrapedFormChecker(profiles[registrar_id], transport)
    for registrar_id in (RegistrarId.MAASHITLA, RegistrarId.BEETAL):
        checkers[registrar_id] = GenericChecker(profiles[registrar_id], transport)
    return checkers


def build_allotment_service(
    settings: Optional[Settings] = None,
    transport: Optional[RegistrarTransport] = None,
    profiles: Optional[Mapping[RegistrarId, RegistrarProfile]] = None,
) -> AllotmentService:
    """
    Create a fully wired AllotmentService.

    Args:
        settings: Settings to use; defaults to the cached process settings
        transport: Shared transport; built from settings when omitted
        profiles: Registrar profile table; loaded from defaults plus the
            configured override file when omitted

    Raises:
        RegistrarConfigError: When the override file is invalid
    """
    settings = settings or get_settings()
    if profiles is None:
        profiles = load_registrar_profiles(settings.registrar_overrides_file)
    if transport is None:
        transport = RegistrarTransport(
            timeout=settings.http_timeout,
            retry_max=settings.http_retry_max,
            user_agent=settings.http_user_agent,
        )

    def cache_factory() -> ResolutionCache:
        return ResolutionCache(
            ttl_seconds=settings.resolution_cache_ttl_seconds,
            max_entries=settings.resolution_cache_max_entries,
        )

    resolver = IdentifierResolver(
        build_listing_sources(profiles, transport), cache_factory=cache_factory
    )
    dispatcher = AllotmentDispatcher(build_checkers(profiles, transport, resolver), list(profiles))

    logger.info(
        "Allotment service initialized",
        extra={
            "registrars": len(dispatcher.checkers),
            "cache_ttl_seconds": settings.resolution_cache_ttl_seconds,
        },
    )
    return AllotmentService(dispatcher, profiles, resolver)
