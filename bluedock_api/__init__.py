"""
Top‑level package for the BlueDock service‑order API.

The package itself exports nothing; the FastAPI application and all
of its submodules live under ``app``, so they are imported with fully
qualified names such as ``bluedock_api.app.main``.
"""

__all__ = []
