"""Structured logging for registrar lookups, built on structlog.

Every event is rendered as one JSON line with an ISO-8601 timestamp, level and
logger name. Applicant data never reaches a handler unmasked:

- values under PAN-like keys (``pan``, ``pancard``, ``pan_number`` ...) keep
  their first five and last character, e.g. ``ABCDE****F``
- PAN-shaped tokens inside any other string value (error messages, URLs) are
  masked the same way
- tokens, view state, passwords and secrets are replaced by ``[REDACTED]``

Environment:
- LOG_LEVEL: read through ipo_data_hub.config.settings. Default: INFO
- LOG_TO_FILE: 1/true/yes adds a daily rotating file handler
- LOG_FILE_DIR: directory for that file. Default: logs/

Usage:
    >>> from ipo_data_hub.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("allotment.check_started", registrar="bigshare", pan="ABCDE1234F")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from ipo_data_hub.config import get_settings

SENSITIVE_KEY_PATTERN = re.compile(
    r".*(password|token|api_key|secret|viewstate|eventvalidation).*", re.IGNORECASE
)
PAN_KEY_PATTERN = re.compile(r"^(pan|pan_?no|pan_number|pancard|pan_card)s?$", re.IGNORECASE)
PAN_IN_TEXT_PATTERN = re.compile(r"\b([A-Z]{5})([0-9]{4})([A-Z]?)\b")

REDACTED_VALUE = "[REDACTED]"


def mask_pan(value: Any) -> Any:
    """Mask the middle of a PAN, e.g. ``ABCDE1234F`` -> ``ABCDE****F``."""
    if isinstance(value, (list, tuple)):
        return [mask_pan(item) for item in value]
    if not isinstance(value, str) or len(value) < 6:
        return value
    return value[:5] + "*" * (len(value) - 6) + value[-1]


def mask_pans_in_text(text: str) -> str:
    """Mask every PAN-shaped token (strict or relaxed) inside free text."""
    return PAN_IN_TEXT_PATTERN.sub(lambda m: f"{m.group(1)}****{m.group(3)}", text)


def _sanitize_value(key: str, value: Any) -> Any:
    if SENSITIVE_KEY_PATTERN.match(key):
        return REDACTED_VALUE
    if PAN_KEY_PATTERN.match(key):
        return mask_pan(value)
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    if isinstance(value, str):
        return mask_pans_in_text(value)
    return value


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` safe to log.

    Example:
        >>> sanitize_for_logging({"token": "abc", "pan": "ABCDE1234F"})
        {"token": "[REDACTED]", "pan": "ABCDE****F"}
    """
    return {key: _sanitize_value(str(key), value) for key, value in data.items()}


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> int:
    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except Exception:
        # Unreadable settings fall back to the raw environment
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _log_file_path() -> Path:
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"ipodatahub-{datetime.now().strftime('%Y%m%d')}.log"


def _build_handlers(level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if os.getenv("LOG_TO_FILE", "").lower() in ("1", "true", "yes"):
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(_log_file_path()),
                when="midnight",
                interval=1,
                backupCount=30,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def _configure_structlog() -> None:
    level = _get_log_level()
    logging.basicConfig(format="%(message)s", level=level, handlers=[])
    for handler in _build_handlers(level):
        logging.root.addHandler(handler)

    processors: List[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


_configure_structlog()


def get_logger(name: str) -> Any:
    """Return a structlog BoundLogger for ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
