"""Quiz service entrypoint.

Runs the FastAPI application with uvicorn using the host/port from settings.
"""
from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv(".env")

from packages.common.config import get_settings  # noqa: E402
from services.quiz.app import create_app  # noqa: E402

log = logging.getLogger("quiz")


def main() -> None:
    """Build the app and serve it until interrupted."""
    settings = get_settings()
    app = create_app(settings)
    log.info("starting %s on %s:%s (env=%s)", settings.SERVICE_NAME, settings.HOST, settings.PORT, settings.ENV)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
