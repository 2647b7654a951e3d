"""
Allotment dispatcher.

Routes a request to one registrar checker, or fans it out to every checker
sequentially in configuration order. Each checker is isolated: whatever one
raises becomes that registrar's Error result and the batch continues.
"""

import logging
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Union

from .models import AllotmentResult, RegistrarId

logger = logging.getLogger(__name__)


class AllotmentChecker(Protocol):
    def check(self, pan_number: str, ipo_identifier: str) -> AllotmentResult: ...


class AllotmentDispatcher:
    """
    Static lookup table of RegistrarId -> checker.

    Args:
        checkers: One checker per registrar
        order: Fan-out order for ``check_all``; defaults to RegistrarId order
    """

    def __init__(
        self,
        checkers: Mapping[RegistrarId, AllotmentChecker],
        order: Optional[Sequence[RegistrarId]] = None,
    ):
        self.checkers: Dict[RegistrarId, AllotmentChecker] = dict(checkers)
        self.order: List[RegistrarId] = list(order) if order is not None else list(RegistrarId)

    def _lookup(self, registrar_id: Union[RegistrarId, str]) -> Optional[AllotmentChecker]:
        try:
            return self.checkers.get(RegistrarId(registrar_id))
        except ValueError:
            return None

    def check_one(
        self, registrar_id: Union[RegistrarId, str], pan_number: str, ipo_identifier: str
    ) -> AllotmentResult:
        raw_id = registrar_id.value if isinstance(registrar_id, RegistrarId) else str(registrar_id)
        checker = self._lookup(registrar_id)
        if checker is None:
            logger.warning("Unknown registrar requested", extra={"registrar": raw_id})
            return AllotmentResult.failure(raw_id, f"unknown registrar: {raw_id}")

        try:
            return checker.check(pan_number, ipo_identifier)
        except Exception as e:
            # Transport errors never get here; this catches parsing bugs
            logger.exception(
                "Registrar checker raised unexpectedly", extra={"registrar": raw_id}
            )
            return AllotmentResult.failure(raw_id, str(e) or e.__class__.__name__)

    def check_all(self, pan_number: str, ipo_identifier: str) -> List[AllotmentResult]:
        """One result per registrar, in order, regardless of individual failures."""
        results = []
        for registrar_id in self.order:
            results.append(self.check_one(registrar_id, pan_number, ipo_identifier))

        logger.info(
            "Checked all registrars",
            extra={
                "registrars": len(results),
                "successful": sum(1 for result in results if result.success),
            },
        )
        return results
