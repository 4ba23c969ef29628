from __future__ import annotations

from pathlib import Path

from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse, JSONResponse, Response
from starlette.routing import Route

from auth.account_store import AccountStore
from auth.callback_page import CAPTURE_MESSAGE, render_callback_page
from auth.errors import (
    CallbackError,
    DeniedByProvider,
    InvalidOrExpiredSession,
    MalformedCallback,
    TokenIssuanceFailed,
)
from auth.models import CallbackResult, CallbackSuccess
from auth.session_store import SessionStore
from auth.urls import resolve_port
from onboard.constants import CALLBACK_PATH, DEFAULT_PORT, DEFAULT_PUBLIC_DIR, LOGGER

MISSING_CALLBACK_URL_MESSAGE = "缺少回调URL"


class OAuthSessionServer:
    def __init__(
        self,
        *,
        provider,
        account_store: AccountStore,
        sessions: SessionStore | None = None,
        default_port: int = DEFAULT_PORT,
        callback_path: str = CALLBACK_PATH,
        public_dir: str | Path | None = None,
    ) -> None:
        self.provider = provider
        self.account_store = account_store
        self.sessions = sessions if sessions is not None else SessionStore()
        self.default_port = default_port
        self.callback_path = callback_path
        self.public_dir = Path(public_dir) if public_dir else DEFAULT_PUBLIC_DIR

    # -- operations ------------------------------------------------------------

    def generate_auth_url(self, host: str | None) -> str:
        port = resolve_port(host, default_port=self.default_port)
        state = self.sessions.create()
        url = self.provider.generate_auth_url(port, self.callback_path, state)
        LOGGER.info("Issued OAuth session %s... for port %s", state[:8], port)
        return url

    async def process_callback(self, callback_url: str, host: str | None = None) -> CallbackSuccess:
        result = CallbackResult.from_url(callback_url)

        if result.status == "denied":
            raise DeniedByProvider(result.error)
        if result.status == "malformed":
            raise MalformedCallback()
        # Consumed before any await so a duplicate submission cannot also pass.
        if not self.sessions.consume(result.state):
            raise InvalidOrExpiredSession()

        port = resolve_port(host, callback_url, default_port=self.default_port)
        account = await self.provider.authenticate(result.code, port, self.callback_path)
        outcome = await self.account_store.add_token(account)
        if not outcome.success:
            raise TokenIssuanceFailed(outcome.message)

        LOGGER.info("Stored account %s (project %s)", account.email or "<unknown>", account.project_id)
        return CallbackSuccess(
            email=account.email or None,
            project_id=account.project_id or None,
            fallback_mode=account.has_quota is False,
        )

    def callback_page(self, params, current_url: str) -> str:
        result = CallbackResult.from_params(params)
        if result.status == "denied":
            LOGGER.error("OAuth authorization denied: %s", result.error)
            return render_callback_page(False, f"授权失败: {result.error}")
        if result.status == "malformed":
            return render_callback_page(False, MalformedCallback.default_message)
        return render_callback_page(True, CAPTURE_MESSAGE, current_url)

    # -- routes ----------------------------------------------------------------

    def routes(self) -> list[Route]:
        return [
            Route("/auth", self._handle_form, methods=["GET"]),
            Route("/auth/generate-url", self._handle_generate_url, methods=["GET"]),
            Route("/auth/process-callback", self._handle_process_callback, methods=["POST"]),
            Route(self.callback_path, self._handle_callback, methods=["GET"]),
        ]

    async def _handle_form(self, request: Request) -> Response:
        del request
        return FileResponse(self.public_dir / "auth.html", media_type="text/html")

    async def _handle_generate_url(self, request: Request) -> Response:
        url = self.generate_auth_url(request.headers.get("host"))
        return JSONResponse({"success": True, "url": url})

    async def _handle_process_callback(self, request: Request) -> Response:
        try:
            payload = await request.json()
        except Exception:
            payload = None

        callback_url = payload.get("callbackUrl") if isinstance(payload, dict) else None
        if not isinstance(callback_url, str) or not callback_url.strip():
            return JSONResponse(
                {"success": False, "message": MISSING_CALLBACK_URL_MESSAGE},
                status_code=400,
            )

        try:
            success = await self.process_callback(callback_url, request.headers.get("host"))
        except CallbackError as error:
            LOGGER.warning("Callback rejected: %s", error)
            return JSONResponse({"success": False, "message": str(error)})
        except Exception as error:
            LOGGER.exception("Failed to process authorization callback")
            return JSONResponse({"success": False, "message": str(error)})

        return JSONResponse(success.to_payload())

    async def _handle_callback(self, request: Request) -> Response:
        return HTMLResponse(self.callback_page(request.query_params, str(request.url)))
