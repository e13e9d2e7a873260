"""Command-line launcher for the persona chat server.

``persona-chat`` reads ``.env``, sets up stdout logging at ``LOG_LEVEL`` and
serves the app built by ``src.api.app.create_app`` on ``HOST``:``PORT``.
"""

import logging
import os
import sys

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    """Serve the chat API (default 0.0.0.0:8000).

    uvicorn calls the app factory itself, so the limiter sweep thread and
    the provider client belong to the served app and are released by its
    lifespan on shutdown.
    """
    import uvicorn

    load_dotenv()
    log_level = os.getenv("LOG_LEVEL", "info")
    configure_logging(log_level)

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Persona chat listening on http://{host}:{port} (docs at /docs)")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    main()
