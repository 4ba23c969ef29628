import asyncio
import time
import urllib.parse

from starlette.testclient import TestClient

from auth.account_store import MemoryAccountStore
from auth.models import AccountRecord
from auth.oauth_server import OAuthSessionServer
from auth.session_store import SessionStore
from onboard.app import build_app

PROVIDER_AUTHORIZE_URL = "https://provider.example.com/o/oauth2/auth"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _account(**overrides) -> AccountRecord:
    values = {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "expires_in": 3599,
        "timestamp": time.time(),
        "project_id": "project-123",
        "email": "user@example.com",
        "has_quota": True,
    }
    values.update(overrides)
    return AccountRecord(**values)


class FakeProvider:
    def __init__(self, *, account: AccountRecord | None = None, error: Exception | None = None):
        self.account = account or _account()
        self.error = error
        self.generated: list[tuple[int, str, str]] = []
        self.authenticated: list[tuple[str, int, str]] = []

    def generate_auth_url(self, port: int, callback_path: str, state: str) -> str:
        self.generated.append((port, callback_path, state))
        query = urllib.parse.urlencode(
            {"redirect_uri": f"http://localhost:{port}{callback_path}", "state": state}
        )
        return f"{PROVIDER_AUTHORIZE_URL}?{query}"

    async def authenticate(self, code: str, port: int, callback_path: str) -> AccountRecord:
        self.authenticated.append((code, port, callback_path))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.account


def _build_oauth_server(*, provider=None, account_store=None, clock=None, base_url=None):
    provider = provider or FakeProvider()
    account_store = account_store or MemoryAccountStore()
    sessions = SessionStore(clock=clock) if clock else SessionStore()
    oauth = OAuthSessionServer(
        provider=provider,
        account_store=account_store,
        sessions=sessions,
    )
    app = build_app(oauth)
    client = TestClient(app, base_url=base_url) if base_url else TestClient(app)
    return oauth, client, provider, account_store


def _state_from_url(url: str) -> str:
    return urllib.parse.parse_qs(urllib.parse.urlparse(url).query)["state"][0]
