from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

from app.config import get_host, get_log_level, get_port, is_cloud_hosted

logger = logging.getLogger(__name__)


def main() -> None:
    # Load .env from backend dir (where server.py runs)
    load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))
    logging.basicConfig(level=get_log_level())

    from app.main import create_app

    host, port = get_host(), get_port()
    app = create_app()
    logger.info("Craft&Mine relay hub starting on %s:%d", host, port)
    logger.info("WebSocket endpoint ready at ws://localhost:%d/", port)
    if is_cloud_hosted():
        logger.info("Cloud hosting detected; server is publicly accessible")
    uvicorn.run(app, host=host, port=port, log_level=get_log_level().lower())


if __name__ == "__main__":
    main()
