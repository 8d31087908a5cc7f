"""Main entry point for the Commerce Bridge host API."""

import logging
import sys

import uvicorn
from dotenv import load_dotenv

from commerce_bridge.config import get_settings


# Webhook client loggers; request-level lines are noise below WARNING
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


def setup_logging() -> None:
    """Configure logging for the bridge.

    The ``commerce_bridge`` loggers follow LOG_LEVEL (DEBUG when DEBUG is
    set, so dropped options and unverified updates are visible). The HTTP
    client used for webhook delivery never logs below WARNING.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper())

    if settings.log_format == "json":
        log_format = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("commerce_bridge").setLevel(
        logging.DEBUG if settings.debug else level
    )
    for name in HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def main() -> None:
    """Run the Commerce Bridge host API."""
    # Load environment variables from .env file
    load_dotenv()

    setup_logging()

    settings = get_settings()
    logger = logging.getLogger(__name__)

    logger.info(
        "Starting Commerce Bridge",
        extra={
            "platform": settings.store_platform,
            "platform_version": settings.store_platform_version,
            "host": settings.bridge_host,
            "port": settings.bridge_port,
        },
    )

    # Import app here to ensure environment is configured
    from commerce_bridge.api.app import create_app

    app = create_app()

    uvicorn.run(
        app,
        host=settings.bridge_host,
        port=settings.bridge_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
