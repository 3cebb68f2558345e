"""Environment-driven settings for the relay hub process."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SEND_TIMEOUT = 5.0
CLOUD_HOST_MARKERS = ("RENDER", "RAILWAY_ENVIRONMENT", "GLITCH")


def get_host() -> str:
    return os.environ.get("HOST", "").strip() or DEFAULT_HOST


def get_port() -> int:
    """Port from PORT env; falls back to 3000 when unset or not a number."""
    raw = os.environ.get("PORT", "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        logger.warning("PORT=%r is not an integer; using %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT


def get_static_dir() -> Path | None:
    """Directory of game assets to serve at /, or None when STATIC_DIR is unset or missing."""
    raw = os.environ.get("STATIC_DIR", "").strip()
    if not raw:
        return None
    path = Path(raw)
    if not path.is_dir():
        logger.warning("STATIC_DIR=%s is not a directory; static files disabled", raw)
        return None
    return path


def get_cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL


def is_cloud_hosted() -> bool:
    return any(os.environ.get(marker) for marker in CLOUD_HOST_MARKERS)


def get_send_timeout() -> float:
    """Seconds a single websocket send may take before the frame is dropped."""
    raw = os.environ.get("SEND_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return DEFAULT_SEND_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("SEND_TIMEOUT_SECONDS=%r is not a number; using %.1f", raw, DEFAULT_SEND_TIMEOUT)
        return DEFAULT_SEND_TIMEOUT
    if value <= 0:
        logger.warning("SEND_TIMEOUT_SECONDS=%r must be positive; using %.1f", raw, DEFAULT_SEND_TIMEOUT)
        return DEFAULT_SEND_TIMEOUT
    return value
