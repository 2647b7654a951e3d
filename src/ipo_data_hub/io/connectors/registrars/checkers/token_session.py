"""
Token/session checker for MUFG Intime.

Flow: generate a short-lived token, resolve the IPO name to a ``company_id``,
then call ``SearchOnPan``. The answer's ``d`` member is an XML fragment whose
first ``<Table>`` row is the applicant record.
"""

from typing import TYPE_CHECKING, Dict, Optional

from ipo_data_hub.config.registrars import RegistrarProfile
from ipo_data_hub.domain.allotment.classification import classify_allotted_count
from ipo_data_hub.domain.allotment.models import (
    AllotmentDetail,
    AllotmentResult,
    StatusKind,
    is_numeric_identifier,
)
from ipo_data_hub.utils.logging import get_logger

from ..models import RegistrarTransportError
from ..parsers import parse_mufg_search_records
from ..transport import RegistrarTransport
from .base import RegistrarChecker
from .direct_json import company_code_note

if TYPE_CHECKING:
    from ipo_data_hub.infrastructure.resolution.resolver import IdentifierResolver

logger = get_logger(__name__)

TOKEN_ENDPOINT = "/Initial_Offer/IPO.aspx/generateToken"


class MufgChecker(RegistrarChecker):
    def __init__(
        self,
        profile: RegistrarProfile,
        transport: RegistrarTransport,
        resolver: "IdentifierResolver",
    ):
        super().__init__(profile, transport)
        self.resolver = resolver

    @property
    def token_url(self) -> str:
        return f"{self.profile.base_url.rstrip('/')}{TOKEN_ENDPOINT}"

    def fetch_token(self) -> str:
        """Best-effort token; an empty token is sent when generation fails."""
        try:
            payload = self._post_json(self.token_url, {})
        except RegistrarTransportError as e:
            logger.warning(
                "allotment.token_unavailable",
                registrar=self.registrar_id.value,
                error=str(e),
            )
            return ""
        if isinstance(payload, dict) and payload.get("d"):
            return str(payload["d"])
        return ""

    def _company_id(self, ipo_identifier: str) -> Optional[str]:
        if is_numeric_identifier(ipo_identifier):
            return ipo_identifier
        return self.resolver.resolve(self.registrar_id, ipo_identifier)

    @staticmethod
    def build_body(pan_number: str, company_id: str, token: str) -> Dict[str, str]:
        return {
            "clientid": company_id,
            "PAN": pan_number,
            "IFSC": "",
            "CHKVAL": "1",
            "token": token,
        }

    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        token = self.fetch_token()

        company_id = self._company_id(ipo_identifier)
        if not company_id:
            return AllotmentResult.failure(
                self.registrar_id, f"No company found for IPO name: {ipo_identifier}"
            )

        payload = self._post_json(
            self.profile.url, self.build_body(pan_number, company_id, token)
        )
        note = company_code_note(company_id, ipo_identifier)

        markup = payload.get("d") if isinstance(payload, dict) else None
        if not markup or not isinstance(markup, str):
            return self._result(StatusKind.UNKNOWN, raw_response=payload, note=note)

        records = parse_mufg_search_records(markup)
        if not records:
            return self._result(StatusKind.NO_RECORD_FOUND, raw_response=payload, note=note)

        record = records[0]
        allotted = record.get("ALLOT", "").strip()
        status = classify_allotted_count(allotted)
        details = AllotmentDetail(
            application_number=record.get("DPCLITID") or record.get("PEMNDG"),
            applicant_name=record.get("NAME1"),
            dp_id=record.get("DPCLITID"),
            category=record.get("PEMNDG"),
            shares_applied=record.get("SHARES"),
            shares_allotted=allotted,
            allotment_status=(
                "Not Allotted" if allotted in ("", "0") else f"{allotted} shares allotted"
            ),
            status=status.label,
        )
        return self._result(status, details=details, raw_response=payload, note=note)
