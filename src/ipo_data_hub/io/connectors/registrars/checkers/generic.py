"""
Generic fallback checker.

Fetches the registrar page and hands back the raw markup with status
ParseNeeded; interpretation is left to the caller.
"""

from typing import Dict, Optional, Tuple

from ipo_data_hub.config.registrars import RegistrarProfile
from ipo_data_hub.domain.allotment.models import AllotmentResult, RegistrarId, StatusKind

from ..transport import RegistrarTransport
from .base import RegistrarChecker

# (company param, PAN param) sent as query string
QUERY_PARAMS: Dict[RegistrarId, Tuple[str, str]] = {
    RegistrarId.MAASHITLA: ("company", "search"),
}


class GenericChecker(RegistrarChecker):
    def __init__(
        self,
        profile: RegistrarProfile,
        transport: RegistrarTransport,
        query_params: Optional[Tuple[str, str]] = None,
    ):
        super().__init__(profile, transport)
        self.query_params = query_params or QUERY_PARAMS.get(profile.registrar_id)

    def build_params(self, pan_number: str, ipo_identifier: str) -> Optional[Dict[str, str]]:
        if not self.query_params:
            return None
        company_param, pan_param = self.query_params
        return {company_param: ipo_identifier, pan_param: pan_number}

    def _check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult:
        response = self.transport.request(
            self.profile.method,
            self.profile.url,
            params=self.build_params(pan_number, ipo_identifier),
        )
        return self._result(StatusKind.PARSE_NEEDED, raw_response=response.text)
