from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from auth.session_store import ExpirySweeper

from .constants import APP_VERSION, LOGGER

if TYPE_CHECKING:
    from auth.oauth_server import OAuthSessionServer


def health_route(oauth_server: "OAuthSessionServer") -> Route:
    async def health(request: Request) -> Response:
        del request
        return JSONResponse(
            {
                "status": "ok",
                "version": APP_VERSION,
                "sessions": len(oauth_server.sessions),
            }
        )

    return Route("/health", health, methods=["GET"])


def build_app(
    oauth_server: "OAuthSessionServer",
    *,
    sweeper: ExpirySweeper | None = None,
) -> Starlette:
    sweeper = sweeper or ExpirySweeper(oauth_server.sessions)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        del app
        sweeper.start()
        LOGGER.info("Session sweeper started")
        try:
            yield
        finally:
            await sweeper.stop()

    routes = [
        *oauth_server.routes(),
        health_route(oauth_server),
        Mount(
            "/static",
            app=StaticFiles(directory=oauth_server.public_dir, check_dir=False),
            name="static",
        ),
    ]
    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.oauth_server = oauth_server
    app.state.sweeper = sweeper
    return app
