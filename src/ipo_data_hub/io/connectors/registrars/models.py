"""
Registrar connector exceptions.
"""

from typing import Optional


class RegistrarTransportError(Exception):
    """Base exception for outbound registrar call failures."""

    pass


class RegistrarTimeoutError(RegistrarTransportError):
    """Raised when a registrar does not answer within the configured timeout."""

    pass


class RegistrarConnectionError(RegistrarTransportError):
    """Raised when a registrar site cannot be reached."""

    pass


class RegistrarHTTPError(RegistrarTransportError):
    """Raised for non-2xx responses."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} from {url}")


class ChallengeRequired(Exception):
    """Raised inside a form flow when every challenge fallback was rejected."""

    def __init__(self, message: str, raw_response: Optional[str] = None) -> None:
        self.raw_response = raw_response
        super().__init__(message)
