"""
Shared test fixtures.

The backend is replaced by FakeBackend, a scripted stand-in for the
outbound requests.Session that records every call. The identity
provider is replaced by FakeIdentityProvider.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import json
import pytest
import requests
from typing import Any, Optional

from config.settings import Settings
from exceptions import IdentityProviderError
from integrations.identity_provider import IdentityUser
from services.console_service import AdminConsole
from utils.session_storage import MemorySessionStorage

from tests.factories import AdminFactory

BACKEND_URL = "http://backend.test"

NOT_JSON = object()


# ===================
# FAKE BACKEND
# ===================

class FakeResponse:
    """Just enough of requests.Response for the gateway client."""

    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        if body is NOT_JSON:
            self.text = "<html>Bad Gateway</html>"
        elif body is None:
            self.text = ""
        else:
            self.text = json.dumps(body)
        self.content = self.text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeBackend:
    """
    Scripted backend session.

    Usage:
        backend.add("GET", "/admin/stores", body={...})
        backend.add("PATCH", "/admin/stores/s1/suspend", status=500)
        backend.add("GET", "/admin/stores", exc=requests.exceptions.ConnectionError())

    Responses for a route are served in order; the last one repeats.
    """

    def __init__(self, base_url: str = BACKEND_URL):
        self.base_url = base_url
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[dict] = []
        self.closed = False

    def add(self, method: str, path: str, body: Any = None, status: int = 200, exc: Optional[Exception] = None):
        self.routes.setdefault((method.upper(), path), []).append(
            exc if exc is not None else FakeResponse(status, body)
        )
        return self

    def request(self, method: str, url: str, **kwargs):
        path = url[len(self.base_url):] if url.startswith(self.base_url) else url
        self.calls.append({"method": method.upper(), "path": path, **kwargs})

        queue = self.routes.get((method.upper(), path))
        if not queue:
            return FakeResponse(404, {"message": f"No route for {method} {path}"})
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def close(self):
        self.closed = True

    def calls_to(self, method: str, path: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method.upper() and c["path"] == path]


# ===================
# FAKE IDENTITY PROVIDER
# ===================

class FakeIdentityProvider:
    """In-memory identity provider with the same surface as the Firebase one."""

    def __init__(self, restored_user: Optional[IdentityUser] = None):
        self.current_user: Optional[IdentityUser] = None
        self._restored_user = restored_user
        self.listeners: list = []
        self.refresh_count = 0
        self.signed_in_tokens: list[str] = []
        self.fail_sign_in: Optional[Exception] = None
        self.fail_refresh: Optional[Exception] = None

    def on_auth_state_changed(self, listener):
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def start(self):
        self.current_user = self._restored_user
        self._notify()

    def sign_in_with_custom_token(self, token: str) -> IdentityUser:
        if self.fail_sign_in is not None:
            raise self.fail_sign_in
        self.signed_in_tokens.append(token)
        self.current_user = IdentityUser(
            uid="uid-1",
            id_token="id-token-0",
            refresh_token="refresh-1",
            expires_at=9999999999
        )
        self._notify()
        return self.current_user

    def get_id_token(self, force_refresh: bool = False) -> str:
        if self.current_user is None:
            raise IdentityProviderError("No signed-in user")
        if force_refresh:
            if self.fail_refresh is not None:
                raise self.fail_refresh
            self.refresh_count += 1
            self.current_user.id_token = f"id-token-{self.refresh_count}"
        return self.current_user.id_token

    def sign_out(self):
        self.current_user = None
        self._notify()

    def _notify(self):
        for listener in list(self.listeners):
            listener(self.current_user)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        api_base_url=BACKEND_URL,
        firebase_api_key="test-key",
        search_debounce_ms=0,
        environment="development",
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def storage() -> MemorySessionStorage:
    return MemorySessionStorage()


@pytest.fixture
def sleeps() -> list:
    """Delays requested by retry loops (nothing actually sleeps)."""
    return []


@pytest.fixture
def console(test_settings, backend, identity, storage, sleeps) -> AdminConsole:
    """
    Initialised console over the fakes, nobody signed in.

    Usage:
        def test_something(console, backend):
            backend.add("GET", "/admin/stores", body=...)
    """
    instance = AdminConsole(
        test_settings,
        http_session=backend,
        identity_provider=identity,
        storage=storage,
        sleep=sleeps.append
    )
    instance.init()
    yield instance
    instance.teardown()


def login_admin(console: AdminConsole, backend: FakeBackend, admin: Optional[dict] = None):
    """Script a successful login and perform it."""
    backend.add("POST", "/admin/login", body=AdminFactory.create_login_response(admin=admin))
    return console.login("admin@platform.test", "secret")


@pytest.fixture
def signed_in_console(console, backend) -> AdminConsole:
    """Console with an admin signed in."""
    login_admin(console, backend)
    return console


@pytest.fixture
def client(console):
    """
    TestClient over an app serving the fake-backed console.

    Nobody is signed in; use signed_in_client for protected screens.
    """
    from fastapi.testclient import TestClient
    from main import create_app

    with TestClient(create_app(console)) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client, console, backend):
    login_admin(console, backend)
    return client


@pytest.fixture
def connection_error() -> Exception:
    return requests.exceptions.ConnectionError("connection refused")
