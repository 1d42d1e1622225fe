"""Read access to the categories lookup table."""

from typing import Any, Dict, List

from bluedock_api.app.core.db import Database


class CategoryService:
    """Service for listing categories.

    Categories are seeded by ``Database.init_db`` and otherwise
    managed outside the API, so only reads are offered here.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_categories(self) -> List[Dict[str, Any]]:
        """Return every category ordered by name."""
        with self.db.cursor() as cursor:
            rows = cursor.execute("SELECT id, name FROM categories ORDER BY name ASC").fetchall()
        return [dict(row) for row in rows]
