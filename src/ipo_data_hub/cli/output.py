"""
JSON output helpers shared by CLI commands.
"""

import json
import sys
from typing import Any

from ipo_data_hub.domain.allotment.models import AllotmentValidationError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def emit_error(message: str, **context: Any) -> None:
    print(json.dumps({"error": message, **context}, ensure_ascii=False), file=sys.stderr)


def emit_validation_error(error: AllotmentValidationError) -> int:
    emit_error(error.message, field=error.field)
    return EXIT_INVALID_INPUT
