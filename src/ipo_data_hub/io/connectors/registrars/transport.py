"""
HTTP Transport layer for registrar connectors.
Handles sessions, browser-mimicking headers, timeouts, retries and error mapping.
"""

import logging
import random
import time
from typing import Callable, Dict, Optional

import requests

from ipo_data_hub.config.settings import get_settings

from .models import (
    RegistrarConnectionError,
    RegistrarHTTPError,
    RegistrarTimeoutError,
    RegistrarTransportError,
)
from .utils import sanitize_url_for_logging

logger = logging.getLogger(__name__)

BROWSER_HEADERS: Dict[str, str] = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class RegistrarTransport:
    """
    Shared outbound HTTP transport for registrar sites.

    Every call is bounded by a fixed timeout. Transport-level failures are
    raised as RegistrarTransportError subclasses so that checkers can convert
    them into Error results at their own boundary.
    """

    def __init__(
        self,
        *,
        timeout: Optional[int] = None,
        retry_max: Optional[int] = None,
        user_agent: Optional[str] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ):
        """
        Initialize registrar transport with configuration.

        Args:
            timeout: Request timeout in seconds. If None, uses settings default
            retry_max: Retries on connection errors and 5xx. If None, uses
                settings default
            user_agent: User-Agent header. If None, uses settings default
            session_factory: Callable creating requests sessions (tests inject
                fakes here)
        """
        self.settings = get_settings()

        self.timeout = timeout if timeout is not None else self.settings.http_timeout
        self.retry_max = (
            retry_max if retry_max is not None else self.settings.http_retry_max
        )
        self.default_headers = dict(BROWSER_HEADERS)
        self.default_headers["User-Agent"] = user_agent or self.settings.http_user_agent
        self.session_factory = session_factory or requests.Session

        # Shared session for stateless JSON calls; form flows open their own
        self.session = self.open_session()

        logger.info(
            "Registrar transport initialized",
            extra={"timeout": self.timeout, "retry_max": self.retry_max},
        )

    def open_session(self) -> requests.Session:
        """Create a fresh cookie jar carrying the default browser headers."""
        session = self.session_factory()
        session.headers.update(self.default_headers)
        return session

    def get(self, url: str, **kwargs) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def request(
        self,
        method: str,
        url: str,
        *,
        session: Optional[requests.Session] = None,
        **kwargs,
    ) -> requests.Response:
        """
        Make HTTP request with timeout, retry and error mapping.

        Args:
            method: HTTP method (GET, POST)
            url: Request URL
            session: Session to use instead of the shared one
            **kwargs: Additional arguments for requests (headers override the
                defaults per call)

        Returns:
            Response object for 2xx responses

        Raises:
            RegistrarTimeoutError: When the call exceeds the timeout
            RegistrarConnectionError: When the site is unreachable after retries
            RegistrarHTTPError: For non-2xx responses (after retries for 5xx)
            RegistrarTransportError: For any other request failure
        """
        active_session = session or self.session
        sanitized_url = sanitize_url_for_logging(url)

        for attempt in range(self.retry_max + 1):
            logger.debug(
                "Making registrar request",
                extra={
                    "method": method,
                    "url": sanitized_url,
                    "attempt": attempt + 1,
                    "max_attempts": self.retry_max + 1,
                },
            )
            try:
                response = active_session.request(
                    method, url, timeout=self.timeout, **kwargs
                )
            except requests.Timeout as e:
                logger.warning(
                    "Registrar request timed out",
                    extra={"url": sanitized_url, "timeout": self.timeout},
                )
                raise RegistrarTimeoutError(
                    f"Timed out after {self.timeout}s calling {sanitized_url}"
                ) from e
            except requests.ConnectionError as e:
                logger.warning(
                    "Registrar connection failed",
                    extra={"url": sanitized_url, "error": str(e), "attempt": attempt + 1},
                )
                if attempt < self.retry_max:
                    self._backoff(attempt)
                    continue
                raise RegistrarConnectionError(
                    f"Could not connect to {sanitized_url}: {e}"
                ) from e
            except requests.RequestException as e:
                logger.warning(
                    "Registrar request failed",
                    extra={"url": sanitized_url, "error": str(e)},
                )
                raise RegistrarTransportError(
                    f"Request to {sanitized_url} failed: {e}"
                ) from e

            if 200 <= response.status_code < 300:
                logger.debug(
                    "Registrar request successful",
                    extra={"url": sanitized_url, "status_code": response.status_code},
                )
                return response

            if response.status_code >= 500 and attempt < self.retry_max:
                logger.warning(
                    "Registrar server error",
                    extra={
                        "url": sanitized_url,
                        "status_code": response.status_code,
                        "attempt": attempt + 1,
                    },
                )
                self._backoff(attempt)
                continue

            logger.warning(
                "Unexpected registrar response",
                extra={"url": sanitized_url, "status_code": response.status_code},
            )
            raise RegistrarHTTPError(response.status_code, sanitized_url)

        # Should not reach here, but for completeness
        raise RegistrarTransportError("Request failed for unknown reason")

    @staticmethod
    def _backoff(attempt: int) -> None:
        # Exponential backoff with jitter
        delay = (2**attempt) * (0.8 + 0.4 * random.random())
        logger.debug(f"Retrying after {delay:.1f}s")
        time.sleep(delay)
