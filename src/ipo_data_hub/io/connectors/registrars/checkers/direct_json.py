"""
Direct JSON checkers: one POST per lookup, JSON answer.

Bigshare needs a numeric company code and resolves free-text IPO names first;
KFintech and Link Intime accept the IPO name as-is.
"""

from typing import TYPE_CHECKING, Any, Dict

from ipo_data_hub.config.registrars import RegistrarProfile
from ipo_data_hub.domain.allotment.classification import (
    classify_allotment_text,
    classify_json_payload,
    detail_from_record,
    json_payload_record,
)
from ipo_data_hub.domain.allotment.models import (
    AllotmentResult,
    StatusKind,
    is_numeric_identifier,
)
from ipo_data_hub.utils.logging import get_logger

from ..transport import RegistrarTransport
from .base import RegistrarChecker, unwrap_aspnet_envelope

if TYPE_CHECKING:
    from ipo_data_hub.infrastructure.resolution.resolver import IdentifierResolver

logger = get_logger(__name__)

BIGSHARE_NO_DATA_MARKER = "No data found"

# Statuses for which a registrar record exists and details are worth returning
_RECORD_STATUSES = (StatusKind.ALLOTTED, StatusKind.NOT_ALLOTTED, StatusKind.PENDING)


def company_code_note(company_code: str, ipo_identifier: str):
    if company_code != ipo_identifier:
        return f"Used company ID: {company_code}"
    return None


class BigshareChecker(RegistrarChecker):
    """Bigshare ``FetchIpodetails`` page method, keyed by company code."""

    def __init__(
        self,
        profile: RegistrarProfile,
        transport: RegistrarTransport,
        resolver: "IdentifierResolver",
    ):
        super().__init__(profile, transport)
        self.resolver = resolver

    def _company_code(self, ipo_identifier: str) -> str:
        if is_numeric_identifier(ipo_identifier):
            return ipo_identifier
        resolved = self.resolver.resolve(self.registrar_id, ipo_identifier)
        if resolved:
            return resolved
        # Best effort: let the registrar interpret the raw name
        logger.info(
            "allotment.resolution_fallback",
            registrar=self.registrar_id.value,
            ipo_identifier=ipo_identifier,
        )
        return ipo_identifier

    @staticmethod
    def build_body(pan_number: str, company_code: str) -> Dict[str, str]:
        return {
            "Applicationno": "",
            "Company": company_code,
            "SelectionType": "PN",
            "PanNo": pan_number,
            "txtcsdl": "",
            "txtDPID": "",
            "txtClId": "",
            "ddlType": "0",
            "lang": "en",
        }

    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        company_code = self._company_code(ipo_identifier)
        payload = self._post_json(self.profile.url, self.build_body(pan_number, company_code))
        note = company_code_note(company_code, ipo_identifier)

        data = unwrap_aspnet_envelope(payload)
        if not isinstance(data, dict):
            return self._result(StatusKind.UNKNOWN, raw_response=payload, note=note)

        application_no = str(data.get("APPLICATION_NO") or "").strip()
        if not application_no or data.get("DPID") == BIGSHARE_NO_DATA_MARKER:
            return self._result(StatusKind.NO_RECORD_FOUND, raw_response=payload, note=note)

        alloted = str(data.get("ALLOTED") or "")
        status = classify_allotment_text(alloted)
        details = detail_from_record(data, status, allotment_status=alloted)
        return self._result(status, details=details, raw_response=payload, note=note)


class JsonStatusChecker(RegistrarChecker):
    """
    Registrars whose JSON schema is not fixed.

    The payload is scanned for a status field under several spellings and
    classified with the shared free-text rule.
    """

    pan_key = "PAN"
    ipo_key = "IPOName"

    def build_body(self, pan_number: str, ipo_identifier: str) -> Dict[str, str]:
        return {self.pan_key: pan_number, self.ipo_key: ipo_identifier}

    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        payload: Any = self._post_json(
            self.profile.url, self.build_body(pan_number, ipo_identifier)
        )
        status = classify_json_payload(payload)
        details = None
        record = json_payload_record(payload)
        if status in _RECORD_STATUSES and record is not None:
            details = detail_from_record(record, status)
        return self._result(status, details=details, raw_response=payload)


class KfintechChecker(JsonStatusChecker):
    pan_key = "PAN"
    ipo_key = "IPOName"


class LinkIntimeChecker(JsonStatusChecker):
    pan_key = "pan"
    ipo_key = "issueName"
