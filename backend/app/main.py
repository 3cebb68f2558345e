import time
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_cors_origins, get_send_timeout, get_static_dir
from routes.health import router as health_router
from routes.hub_ws import router as hub_ws_router
from services.relay_hub import RelayHub


def create_app(*, static_dir: Path | None = None) -> FastAPI:
    app = FastAPI(title="Craft&Mine Relay Hub", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.hub = RelayHub(send_timeout=get_send_timeout())
    app.state.started_at = time.monotonic()

    app.include_router(health_router)
    app.include_router(hub_ws_router)

    # Mounted last so /health and the websocket routes win over files at /.
    static_dir = static_dir or get_static_dir()
    if static_dir is not None:
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    return app


app = create_app()
