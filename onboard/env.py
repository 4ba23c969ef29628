from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .constants import DEFAULT_PUBLIC_DIR, LOGGER

URL_KEYS = (
    "OAUTH_AUTHORIZE_URL",
    "OAUTH_TOKEN_URL",
    "OAUTH_USERINFO_URL",
    "OAUTH_PROJECT_LOOKUP_URL",
)
_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer value.")


def _get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a numeric value.")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=True)


def validate_env() -> None:
    required = ("OAUTH_CLIENT_ID", "OAUTH_CLIENT_SECRET")
    missing = [key for key in required if not os.getenv(key, "").strip()]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    for key in URL_KEYS:
        raw = os.getenv(key, "").strip()
        if not raw:
            continue
        try:
            _HTTP_URL.validate_python(raw)
        except ValidationError as error:
            raise RuntimeError(f"{key} must be a valid http(s) URL.") from error

    port = _get_env_int("SERVER_PORT", 0)
    if port and not 0 < port < 65536:
        raise RuntimeError("SERVER_PORT must be between 1 and 65535.")


def resolve_public_dir() -> Path:
    """Locate the directory holding auth.html.

    An explicit PUBLIC_DIR wins; otherwise the checkout's public/ is used and,
    failing that, ./public relative to the working directory.
    """
    configured = os.getenv("PUBLIC_DIR", "").strip()
    if configured:
        return Path(configured)
    if DEFAULT_PUBLIC_DIR.is_dir():
        return DEFAULT_PUBLIC_DIR
    cwd_dir = Path.cwd() / "public"
    if cwd_dir.is_dir():
        return cwd_dir
    LOGGER.warning("No public directory found; falling back to %s", DEFAULT_PUBLIC_DIR)
    return DEFAULT_PUBLIC_DIR


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("ONBOARD_DEBUG", "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
