from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger("onboard.auth")
HTTP_LOGGER = logging.getLogger("onboard.http")
APP_VERSION = "0.1.0"

CALLBACK_PATH = "/auth/callback"
DEFAULT_PORT = 8045
SESSION_TTL_SECONDS = 10 * 60
SWEEP_INTERVAL_SECONDS = 60

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_PUBLIC_DIR = PROJECT_ROOT / "public"
