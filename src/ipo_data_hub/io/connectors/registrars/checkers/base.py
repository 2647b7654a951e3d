"""
Base class shared by all registrar checkers.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ipo_data_hub.config.registrars import RegistrarProfile
from ipo_data_hub.domain.allotment.models import AllotmentResult, RegistrarId
from ipo_data_hub.utils.logging import get_logger

from ..models import RegistrarTransportError
from ..transport import RegistrarTransport

logger = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


def parse_json_body(response: requests.Response) -> Any:
    """Decode a JSON body, falling back to the raw text for non-JSON answers."""
    try:
        return response.json()
    except ValueError:
        return response.text


def unwrap_aspnet_envelope(payload: Any) -> Any:
    """
    Return the ``d`` member of an ASP.NET page-method response.

    Some endpoints double-encode ``d`` as a JSON string; those are decoded once.
    Returns None when the payload carries no ``d``.
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("d")
    if isinstance(data, str):
        stripped = data.strip()
        if stripped.startswith("{"):
            try:
                return json.loads(stripped)
            except ValueError:
                return data
    return data


class RegistrarChecker(ABC):
    """
    Queries one registrar for one (PAN, IPO) pair.

    Subclasses implement ``_check``; ``check`` converts transport failures
    into Error results so that nothing below the dispatcher raises for an
    unreachable or misbehaving site.
    """

    def __init__(self, profile: RegistrarProfile, transport: RegistrarTransport):
        self.profile = profile
        self.transport = transport

    @property
    def registrar_id(self) -> RegistrarId:
        return self.profile.registrar_id

    def check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        log = logger.bind(registrar=self.registrar_id.value, pan=pan_number)
        log.info("allotment.check_started", ipo_identifier=ipo_identifier)
        try:
            result = self._check(pan_number, ipo_identifier)
        except RegistrarTransportError as e:
            log.warning("allotment.transport_failed", error=str(e))
            return AllotmentResult.failure(self.registrar_id, str(e))

        log.info(
            "allotment.check_completed",
            status=result.status.value,
            success=result.success,
        )
        return result

    @abstractmethod
    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        """Perform the registrar-specific lookup."""

    def _post_json(
        self,
        url: str,
        body: Dict[str, Any],
        *,
        session: Optional[requests.Session] = None,
    ) -> Any:
        response = self.transport.post(url, json=body, headers=JSON_HEADERS, session=session)
        return parse_json_body(response)

    def _result(self, status, **kwargs) -> AllotmentResult:
        return AllotmentResult(success=True, registrar=self.registrar_id, status=status, **kwargs)
