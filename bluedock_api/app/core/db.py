"""
SQLite database integration and simple migration system.

The ``Database`` class owns the single connection the API uses for its
whole lifetime: it is opened by the startup handler, shared by every
request through the ``get_db`` dependency and closed on shutdown.
``init_db`` brings the schema up to date and seeds the default
categories; both steps are safe to run on every start.

Applied migration versions are stored in the ``migrations`` table and
new migrations run in order.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fastapi import Request

from .exceptions import StorageError


logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES = ["Molinetes", "Carretilhas", "Carabinas", "Varas", "Acessórios"]


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS categories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS services (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            receipt_number TEXT NOT NULL UNIQUE,
            customer_name TEXT NOT NULL,
            customer_phone TEXT,
            customer_address TEXT,
            customer_email TEXT,
            item_description TEXT NOT NULL,
            service_details TEXT,
            price REAL NOT NULL DEFAULT 0 CHECK(price >= 0),
            status TEXT NOT NULL CHECK(status IN (
                'Em Orçamento',
                'Aguardando Aprovação',
                'Pendente',
                'Em Andamento',
                'Aguardando Peça',
                'Peça Indisponível',
                'Pronto',
                'Concluído',
                'Cancelado'
            )),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            finished_at TIMESTAMP,
            category_id INTEGER,
            FOREIGN KEY(category_id) REFERENCES categories(id)
        );
        """,
    ),
    # Migration 2: indices used by the listing and productivity queries
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_services_created_at ON services(created_at);
        CREATE INDEX IF NOT EXISTS idx_services_status ON services(status);
        CREATE INDEX IF NOT EXISTS idx_services_category_id ON services(category_id);
        """,
    ),
]


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def get_database_path(db_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths and the special ``:memory:`` name are used as is;
    relative paths are resolved against the project root.
    """
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


class Database:
    """Process‑wide handle to the SQLite store."""

    def __init__(self, db_url: str) -> None:
        self.path = get_database_path(db_url)
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """Open the shared connection if it is not open yet.

        Foreign keys are disabled by default in SQLite and must be
        turned on per connection, otherwise ``REFERENCES`` clauses are
        silently ignored.  A ``casefold`` SQL function is registered so
        text searches fold accented capitals the way Python does;
        SQLite's own ``LOWER`` only handles ASCII.
        """
        if self._conn is None:
            logger.info("Opening SQLite database at %s", self.path)
            try:
                conn = sqlite3.connect(self.path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON")
                conn.create_function("casefold", 1, _casefold, deterministic=True)
            except sqlite3.Error as exc:
                raise StorageError(f"Could not open database: {exc}") from exc
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Closed SQLite database at %s", self.path)

    @property
    def connection(self) -> sqlite3.Connection:
        return self.connect()

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor and commit once the block finishes.

        Any ``sqlite3.Error`` rolls the transaction back and is
        re‑raised as ``StorageError`` so callers never see a half
        applied write.
        """
        conn = self.connection
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            cursor.close()

    def init_db(self) -> None:
        """Apply pending migrations and seed the default categories.

        Creates the ``migrations`` table if it does not exist, checks
        the current schema version and runs every migration with a
        higher version.  Existing data is never dropped.

        ``executescript`` commits whatever is pending before it runs, so
        each migration carries its own ``BEGIN``/``COMMIT`` together with
        its ``migrations`` row: a failing migration leaves neither its
        schema changes nor its version behind.
        """
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) AS version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    cursor.executescript(
                        f"BEGIN;\n{sql}\nINSERT INTO migrations (version) VALUES ({int(version)});\nCOMMIT;"
                    )
                    logger.info("Applied migration %s", version)
                    current_version = version

            for name in DEFAULT_CATEGORIES:
                cursor.execute(
                    "INSERT OR IGNORE INTO categories (name) VALUES (?)", (name,)
                )


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the database attached to the app."""
    return request.app.state.db
