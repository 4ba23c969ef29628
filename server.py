from __future__ import annotations

import os

import uvicorn
from starlette.applications import Starlette

from auth.account_store import FileAccountStore
from auth.oauth_server import OAuthSessionServer
from auth.provider import (
    GOOGLE_AUTHORIZE_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    OAuthProvider,
)
from onboard.app import build_app
from onboard.constants import DEFAULT_PORT, LOGGER
from onboard.env import (
    _get_env_float,
    _get_env_int,
    load_env,
    resolve_public_dir,
    setup_logging,
    validate_env,
)
from onboard.http import build_http_client


def create_app() -> Starlette:
    load_env()
    setup_logging()
    validate_env()

    timeout = _get_env_float("OAUTH_HTTP_TIMEOUT", 30)
    max_retries = _get_env_int("OAUTH_HTTP_MAX_RETRIES", 2)
    scopes = os.getenv("OAUTH_SCOPES", "").split() or None

    provider = OAuthProvider(
        client_id=os.getenv("OAUTH_CLIENT_ID", "").strip(),
        client_secret=os.getenv("OAUTH_CLIENT_SECRET", "").strip(),
        scopes=scopes,
        authorize_url=os.getenv("OAUTH_AUTHORIZE_URL", GOOGLE_AUTHORIZE_URL),
        token_url=os.getenv("OAUTH_TOKEN_URL", GOOGLE_TOKEN_URL),
        userinfo_url=os.getenv("OAUTH_USERINFO_URL", GOOGLE_USERINFO_URL),
        project_lookup_url=os.getenv("OAUTH_PROJECT_LOOKUP_URL", "").strip() or None,
        http_client_factory=lambda: build_http_client(timeout=timeout, max_retries=max_retries),
    )
    account_store = FileAccountStore(os.getenv("ACCOUNTS_PATH", "accounts.json"))
    oauth_server = OAuthSessionServer(
        provider=provider,
        account_store=account_store,
        default_port=_get_env_int("SERVER_PORT", DEFAULT_PORT),
        public_dir=resolve_public_dir(),
    )
    LOGGER.info("Open /auth to add an account")
    return build_app(oauth_server)


def main() -> None:
    load_env()
    host = os.getenv("SERVER_HOST", "127.0.0.1")
    port = int(os.getenv("SERVER_PORT", str(DEFAULT_PORT)))
    app = create_app()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
