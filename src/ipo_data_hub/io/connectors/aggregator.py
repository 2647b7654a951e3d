"""
Client for the IPO Ninja allotment aggregator.

The aggregator answers allotment lookups for IPOs whose basis of allotment is
out, independent of the registrar sites. Batch checks make one sequential
call per PAN; a failing PAN is recorded in the batch instead of aborting it.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ipo_data_hub.config.settings import get_settings
from ipo_data_hub.domain.allotment.models import AllotmentValidationError, validate_pan
from ipo_data_hub.utils.logging import get_logger

from .registrars.models import RegistrarTransportError
from .registrars.transport import RegistrarTransport

logger = get_logger(__name__)

ALLOTTED_IPOS_ENDPOINT = "/Ipo/ipo/getallotmentoutipo"
LIVE_ALLOTMENT_ENDPOINT = "/IpoBids/fetchliveallotment"


class AggregatorClientError(Exception):
    """Raised when an aggregator list operation fails."""

    pass


class AggregatorPanResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pancard: str
    data: Any = None
    error: Optional[str] = None


class AggregatorBatchResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data: List[AggregatorPanResult] = Field(default_factory=list)
    total_requests: int = 0
    successful_requests: int = 0

    def to_public_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class IpoNinjaClient:
    """
    Synchronous aggregator client sharing the registrar transport.

    Args:
        transport: Transport used for outbound calls; built from settings
            when omitted
        base_url: API root; defaults to ``settings.aggregator_base_url``
    """

    def __init__(
        self,
        transport: Optional[RegistrarTransport] = None,
        base_url: Optional[str] = None,
    ):
        self.transport = transport or RegistrarTransport()
        self.base_url = (base_url or get_settings().aggregator_base_url).rstrip("/")

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def list_allotted_ipos(self) -> List[Dict[str, Any]]:
        """
        IPOs whose allotment is out.

        Returns:
            The ``dataResult`` list, empty when the aggregator omits it

        Raises:
            AggregatorClientError: On transport failure or a non-JSON answer
        """
        url = self._url(ALLOTTED_IPOS_ENDPOINT)
        try:
            payload = self.transport.get(url).json()
        except RegistrarTransportError as e:
            logger.error("aggregator.list_failed", error=str(e))
            raise AggregatorClientError(f"Failed to fetch allotted IPOs: {e}") from e
        except ValueError as e:
            raise AggregatorClientError(f"Invalid JSON from {url}: {e}") from e

        data = payload.get("dataResult") if isinstance(payload, dict) else None
        result = data if isinstance(data, list) else []
        logger.info("aggregator.allotted_ipos_fetched", count=len(result))
        return result

    def _fetch_one(self, ipo_id: Any, pancard: str) -> AggregatorPanResult:
        try:
            response = self.transport.post(
                self._url(LIVE_ALLOTMENT_ENDPOINT),
                json={"ipoid": ipo_id, "pancard": pancard},
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        except RegistrarTransportError as e:
            logger.warning("aggregator.pan_check_failed", pancard=pancard, error=str(e))
            return AggregatorPanResult(pancard=pancard, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = response.text
        return AggregatorPanResult(pancard=pancard, data=data)

    def check_allotment(
        self, ipo_id: Any, pancards: Union[str, Sequence[str]]
    ) -> AggregatorBatchResult:
        """
        Check allotment for one or more PANs against one IPO.

        Every PAN is validated with the relaxed pattern before any call is made.

        Raises:
            AllotmentValidationError: Missing IPO id, no PANs or a malformed PAN
        """
        if ipo_id is None or not str(ipo_id).strip():
            raise AllotmentValidationError("ipoid", "ipoid is required")

        pan_list = [pancards] if isinstance(pancards, str) else list(pancards or [])
        if not pan_list:
            raise AllotmentValidationError("pancard", "pancard is required")
        validated = [validate_pan(pan, relaxed=True) for pan in pan_list]

        results = [self._fetch_one(ipo_id, pan) for pan in validated]
        batch = AggregatorBatchResult(
            data=results,
            total_requests=len(validated),
            successful_requests=sum(1 for result in results if result.error is None),
        )
        logger.info(
            "aggregator.batch_checked",
            ipo_id=ipo_id,
            total=batch.total_requests,
            successful=batch.successful_requests,
        )
        return batch
