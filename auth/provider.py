from __future__ import annotations

import secrets
import string
import time

import httpx

from auth.models import AccountRecord
from auth.urls import append_query_params, build_redirect_uri
from onboard.constants import LOGGER

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

_ADJECTIVES = ("useful", "bright", "swift", "calm", "bold", "quiet", "lucky", "noble")
_NOUNS = ("fuze", "wave", "spark", "flow", "core", "atlas", "harbor", "orbit")
_BASE36 = string.ascii_lowercase + string.digits


def generate_project_id() -> str:
    """Random stand-in used when the account has no project of its own."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{secrets.choice(_ADJECTIVES)}-{secrets.choice(_NOUNS)}-{suffix}"


def _json_object(response: httpx.Response) -> dict | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _project_from_payload(payload: dict) -> str | None:
    project = payload.get("cloudaicompanionProject")
    if isinstance(project, dict):
        project = project.get("id")
    if isinstance(project, str) and project.strip():
        return project.strip()
    return None


class OAuthProvider:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        scopes: list[str] | None = None,
        authorize_url: str = GOOGLE_AUTHORIZE_URL,
        token_url: str = GOOGLE_TOKEN_URL,
        userinfo_url: str = GOOGLE_USERINFO_URL,
        project_lookup_url: str | None = None,
        http_client_factory=httpx.AsyncClient,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.scopes = scopes or list(DEFAULT_SCOPES)
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.userinfo_url = userinfo_url
        self.project_lookup_url = project_lookup_url
        self._http_client_factory = http_client_factory

    def generate_auth_url(self, port: int, callback_path: str, state: str) -> str:
        return append_query_params(
            self.authorize_url,
            {
                "client_id": self.client_id,
                "redirect_uri": build_redirect_uri(port, callback_path),
                "response_type": "code",
                "scope": " ".join(self.scopes),
                "access_type": "offline",
                "prompt": "consent",
                "include_granted_scopes": "true",
                "state": state,
            },
        )

    async def authenticate(self, code: str, port: int, callback_path: str) -> AccountRecord:
        async with self._http_client_factory() as client:
            tokens = await self._exchange_code(
                client, code=code, redirect_uri=build_redirect_uri(port, callback_path)
            )
            access_token = tokens["access_token"]
            email = await self._fetch_email(client, access_token)
            project_id, has_quota = await self._resolve_project(client, access_token)

        return AccountRecord(
            access_token=access_token,
            refresh_token=tokens.get("refresh_token", ""),
            expires_in=int(tokens.get("expires_in", 3599)),
            timestamp=time.time(),
            project_id=project_id,
            email=email,
            has_quota=has_quota,
        )

    async def _exchange_code(
        self, client: httpx.AsyncClient, *, code: str, redirect_uri: str
    ) -> dict:
        try:
            response = await client.post(
                self.token_url,
                data={
                    "grant_type": "authorization_code",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": redirect_uri,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            detail = error.response.text
            raise RuntimeError(
                f"Token request failed with status {error.response.status_code}: {detail}"
            ) from error

        payload = _json_object(response)
        if payload is None:
            raise RuntimeError("Token response is not a JSON object.")
        if not isinstance(payload.get("access_token"), str) or not payload["access_token"]:
            raise RuntimeError("Token response missing access_token.")
        return payload

    async def _fetch_email(self, client: httpx.AsyncClient, access_token: str) -> str | None:
        try:
            response = await client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as error:
            LOGGER.warning("Could not fetch account email: %s", error)
            return None
        payload = _json_object(response)
        if payload is None:
            LOGGER.warning("Userinfo response is not a JSON object; email unknown")
            return None
        email = payload.get("email")
        return email if isinstance(email, str) and email else None

    async def _resolve_project(
        self, client: httpx.AsyncClient, access_token: str
    ) -> tuple[str, bool | None]:
        if not self.project_lookup_url:
            return generate_project_id(), None

        response = await client.post(
            self.project_lookup_url,
            headers={"Authorization": f"Bearer {access_token}"},
            json={"metadata": {"ideType": "IDE_UNSPECIFIED", "pluginType": "GEMINI"}},
        )
        if response.status_code >= 400:
            LOGGER.warning(
                "Project lookup failed with status %s; using a generated project id",
                response.status_code,
            )
            return generate_project_id(), False

        payload = _json_object(response)
        project_id = _project_from_payload(payload) if payload is not None else None
        if project_id is None:
            LOGGER.info("Account has no project; using a generated project id")
            return generate_project_id(), False
        return project_id, True
