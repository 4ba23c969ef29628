from __future__ import annotations

import urllib.parse
from dataclasses import dataclass


@dataclass
class Session:
    state: str
    created_at: float


@dataclass
class CallbackResult:
    code: str | None
    state: str | None
    error: str | None

    @property
    def status(self) -> str:
        if self.error:
            return "denied"
        if not self.code or not self.state:
            return "malformed"
        return "authorized"

    @classmethod
    def from_params(cls, params) -> "CallbackResult":
        return cls(
            code=params.get("code") or None,
            state=params.get("state") or None,
            error=params.get("error") or None,
        )

    @classmethod
    def from_url(cls, raw_url: str) -> "CallbackResult":
        parsed = urllib.parse.urlsplit(raw_url.strip())
        query = urllib.parse.parse_qs(parsed.query)
        return cls.from_params({key: values[0] for key, values in query.items()})


@dataclass
class AccountRecord:
    access_token: str
    refresh_token: str
    expires_in: int
    timestamp: float
    project_id: str
    email: str | None = None
    has_quota: bool | None = None


@dataclass
class AddTokenResult:
    success: bool
    message: str | None = None


@dataclass
class CallbackSuccess:
    email: str | None
    project_id: str | None
    fallback_mode: bool

    def to_payload(self) -> dict:
        return {
            "success": True,
            "email": self.email,
            "projectId": self.project_id,
            "fallbackMode": self.fallback_mode,
        }
