"""Entry point for the BlueDock API server.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the ``API_HOST`` and ``API_PORT`` environment variables; the
remaining configuration (database path, log level, CORS origins) is
read by ``bluedock_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from bluedock_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted.

    Defaults are ``0.0.0.0`` and ``3001`` so the dashboard dev server
    can keep its own port.
    """
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "3001"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("BlueDock API listening on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
