"""Pytest configuration and shared fixtures."""

import base64
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from brewops_forms.api import BrewOpsClient, SessionFileCredentials
from brewops_forms.core import Lifetime, ManualScheduler
from brewops_forms.notifications import RecordingNotifier

Route = tuple[int, Any] | Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """In-memory stand-in for the BrewOps REST backend.

    Routes map (method, path) to either a (status, json body) pair or a
    handler returning an httpx.Response. Unknown routes return 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status_code: int = 200) -> None:
        self.routes[(method, path)] = (status_code, body)

    def on(
        self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]
    ) -> None:
        self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status_code, body = route
        return httpx.Response(status_code, json=body)

    def body(self, index: int = -1) -> Any:
        """Decoded JSON body of a recorded request."""
        content = self.requests[index].content
        return json.loads(content) if content else None


def make_jwt(claims: dict[str, Any]) -> str:
    """Build an unsigned JWT carrying the given claims."""

    def encode(part: dict[str, Any]) -> str:
        raw = json.dumps(part).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    return f"{encode({'alg': 'HS256', 'typ': 'JWT'})}.{encode(claims)}.signature"


@pytest.fixture
def scheduler() -> ManualScheduler:
    """A scheduler that only fires when advanced."""
    return ManualScheduler()


@pytest.fixture
def lifetime(scheduler: ManualScheduler) -> Lifetime:
    return Lifetime(scheduler)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def session_path(tmp_path: Path) -> Path:
    return tmp_path / "session.json"


@pytest.fixture
def credentials(session_path: Path) -> SessionFileCredentials:
    return SessionFileCredentials(session_path)


@pytest.fixture
def client(backend: FakeBackend, credentials: SessionFileCredentials) -> BrewOpsClient:
    """Client wired to the fake backend."""
    client = BrewOpsClient(
        "http://testserver",
        credentials=credentials,
        transport=httpx.MockTransport(backend.handle),
    )
    yield client
    client.close()


@pytest.fixture
def brewops_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the BrewOps home at a temporary directory with a clean environment."""
    home = tmp_path / "brewops-home"
    monkeypatch.setenv("BREWOPS_HOME", str(home))
    monkeypatch.delenv("BREWOPS_BACKEND_URL", raising=False)
    monkeypatch.delenv("BREWOPS_SESSION_PATH", raising=False)
    return home


@pytest.fixture
def make_token() -> Callable[[dict[str, Any]], str]:
    """Builder for unsigned JWTs."""
    return make_jwt
