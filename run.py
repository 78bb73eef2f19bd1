"""Entry point that serves the Social API with uvicorn.

Host and port come from ``APP_HOST`` and ``APP_PORT`` (see
``social_api.app.core.config``); other settings such as
``DATABASE_URL`` and ``LOG_LEVEL`` are read from the environment too.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from social_api.app.core.config import settings


async def main() -> None:
    config = Config(
        app="social_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")
