"""Pytest configuration and shared fixtures.

An optional .idh_test_env file at the repository root is loaded FIRST with
override=True so that local settings (e.g. LOG_LEVEL) never leak in from the
developer's shell. No test touches the network: registrar calls go through
FakeSession, routed by (method, url).
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_IDH_TEST_ENV_FILE = Path(__file__).parent.parent / ".idh_test_env"
if _IDH_TEST_ENV_FILE.exists():
    load_dotenv(_IDH_TEST_ENV_FILE, override=True)

import json
from typing import Any, Callable, Dict, List, Tuple, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from ipo_data_hub.config import get_settings
from ipo_data_hub.io.connectors.registrars.transport import RegistrarTransport

Outcome = Union[requests.Response, BaseException, Callable[..., Any], List[Any]]


def make_response(
    status_code: int = 200,
    *,
    json_body: Any = None,
    text: str = "",
    url: str = "https://registrar.test/",
) -> requests.Response:
    """Build a real requests.Response without any network I/O."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json; charset=utf-8"
    else:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/html; charset=utf-8"
    return response


class FakeSession:
    """
    Stand-in for requests.Session.

    ``routes`` maps (METHOD, url) to a Response, an exception instance to
    raise, a callable ``(method, url, **kwargs) -> Response``, or a list of
    those consumed in order (the last one repeats). Unrouted calls raise
    requests.ConnectionError.
    """

    def __init__(self, routes: Dict[Tuple[str, str], Outcome]):
        self.routes = routes
        self.headers: CaseInsensitiveDict = CaseInsensitiveDict()
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        key = (method.upper(), url)
        self.calls.append((key[0], url, kwargs))
        if key not in self.routes:
            raise requests.ConnectionError(f"no route for {key[0]} {url}")

        outcome = self.routes[key]
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(method, url, **kwargs)
        return outcome

    def close(self) -> None:
        self.closed = True


class SessionRecorder:
    """Session factory that remembers every FakeSession it hands out."""

    def __init__(self, routes: Dict[Tuple[str, str], Outcome]):
        self.routes = routes
        self.sessions: List[FakeSession] = []

    def __call__(self) -> FakeSession:
        session = FakeSession(self.routes)
        self.sessions.append(session)
        return session

    @property
    def calls(self) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [call for session in self.sessions for call in session.calls]

    def urls_called(self, method: str = None) -> List[str]:
        return [url for m, url, _ in self.calls if method is None or m == method]


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def routes() -> Dict[Tuple[str, str], Outcome]:
    return {}


@pytest.fixture
def sessions(routes) -> SessionRecorder:
    return SessionRecorder(routes)


@pytest.fixture
def transport(sessions) -> RegistrarTransport:
    return RegistrarTransport(timeout=5, retry_max=0, session_factory=sessions)


@pytest.fixture
def respond() -> Callable[..., requests.Response]:
    """The make_response builder, for tests that route registrar calls."""
    return make_response
