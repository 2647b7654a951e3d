"""
Allotment service facade.

Inbound entry point: validates the raw request before any registrar is
contacted, then routes it to one registrar or to all of them. Also exposes
the registrar table and management of the identifier-resolution caches.

Collaborators (dispatcher, resolver, profile table) are injected; see
ipo_data_hub.infrastructure.factory.build_allotment_service for the wiring.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Union

from .dispatcher import AllotmentDispatcher
from .models import AllotmentResult, RegistrarId, build_allotment_request, parse_registrar

if TYPE_CHECKING:
    from ipo_data_hub.config.registrars import RegistrarProfile

logger = logging.getLogger(__name__)


class ResolutionCacheManager(Protocol):
    def clear_cache(self, registrar_id: Optional[RegistrarId] = None) -> None: ...

    def cleanup_cache(self, registrar_id: Optional[RegistrarId] = None) -> int: ...

    def cache_stats(self, registrar_id: RegistrarId) -> Dict[str, object]: ...


class AllotmentService:
    def __init__(
        self,
        dispatcher: AllotmentDispatcher,
        profiles: Mapping[RegistrarId, "RegistrarProfile"],
        resolver: ResolutionCacheManager,
    ):
        self.dispatcher = dispatcher
        self.profiles = dict(profiles)
        self.resolver = resolver

    def check_allotment(
        self,
        pan_number: Any,
        ipo_identifier: Any,
        registrar: Any = None,
    ) -> Union[AllotmentResult, List[AllotmentResult]]:
        """
        Check allotment status for one PAN and one IPO.

        Args:
            pan_number: Applicant PAN, strict format ``ABCDE1234F``
            ipo_identifier: Registrar company code or free-text IPO name
            registrar: Optional registrar id restricting the lookup

        Returns:
            A single result when ``registrar`` is given, otherwise one result
            per registrar in configuration order

        Raises:
            AllotmentValidationError: Malformed PAN, empty identifier or
                unsupported registrar (no outbound call is made)
        """
        request = build_allotment_request(pan_number, ipo_identifier, registrar)
        logger.info(
            "Allotment check requested",
            extra={
                "registrar": request.registrar.value if request.registrar else "all",
                "numeric_identifier": request.is_numeric,
            },
        )

        if request.registrar is not None:
            return self.dispatcher.check_one(
                request.registrar, request.pan_number, request.ipo_identifier
            )
        return self.dispatcher.check_all(request.pan_number, request.ipo_identifier)

    def list_supported_registrars(self) -> List["RegistrarProfile"]:
        return [self.profiles[registrar_id] for registrar_id in self.dispatcher.order]

    def clear_cache(self, registrar: Any = None) -> None:
        registrar_id = parse_registrar(registrar) if registrar else None
        self.resolver.clear_cache(registrar_id)

    def cleanup_cache(self, registrar: Any = None) -> int:
        registrar_id = parse_registrar(registrar) if registrar else None
        return self.resolver.cleanup_cache(registrar_id)

    def cache_stats(self, registrar: Any) -> Dict[str, object]:
        return self.resolver.cache_stats(parse_registrar(registrar))
