"""
Registrar connector package.
"""

from .models import (
    ChallengeRequired,
    RegistrarConnectionError,
    RegistrarHTTPError,
    RegistrarTimeoutError,
    RegistrarTransportError,
)
from .transport import RegistrarTransport

__all__ = [
    "RegistrarTransport",
    "RegistrarTransportError",
    "RegistrarTimeoutError",
    "RegistrarConnectionError",
    "RegistrarHTTPError",
    "ChallengeRequired",
]
