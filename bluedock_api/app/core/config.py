"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables; defaults are provided for every field so the
API runs out of the box against a local SQLite file.  Tests and
embedding code may build their own ``Settings`` instance and pass it
to ``create_app`` instead of relying on the environment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "BlueDock API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "services.db")

    # Comma‑separated list of origins allowed to call the API from a
    # browser.  The dashboard is usually served from another port.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Services created before this date (ISO ``YYYY-MM-DD``) are left
    # out of the productivity report.
    productivity_start_date: str = os.getenv("PRODUCTIVITY_START_DATE", "2025-11-27")

    # How many receipt numbers to try before giving up on a create
    # that keeps hitting the UNIQUE constraint.
    receipt_retry_attempts: int = int(os.getenv("RECEIPT_RETRY_ATTEMPTS", "5"))

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings()
