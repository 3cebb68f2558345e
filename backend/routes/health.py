from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request) -> dict[str, Any]:
    """Liveness probe for hosting platforms."""
    hub = request.app.state.hub
    return {
        "status": "ok",
        "activeSessions": hub.session_count,
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }
