"""
Business logic for service orders.

``OrderService`` implements the create/read/update/delete operations
on the ``services`` table and the paginated listing used by the
dashboard.  It receives the ``Database`` it works on instead of
reaching for a global connection, so each instance can be pointed at
any store (tests use a temporary file).

Status lifecycle: an order starts as ``Pendente``.  When an update
moves it into ``Pronto`` or ``Concluído`` the ``finished_at`` column
is stamped, but only if it is still empty, so moving between those
two states keeps the first completion time.  Any other status clears
``finished_at``.
"""

from __future__ import annotations

import asyncio
import logging
import math
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bluedock_api.app.core.config import Settings
from bluedock_api.app.core.db import Database
from bluedock_api.app.core.exceptions import NotFoundError, StorageError, ValidationError
from bluedock_api.app.schemas.service import (
    FINISHED_STATUSES,
    INITIAL_STATUS,
    ServiceCreate,
    ServiceStatus,
    ServiceUpdate,
    canonical_status,
)


logger = logging.getLogger(__name__)


SELECT_SERVICE = """
    SELECT s.id, s.receipt_number, s.customer_name, s.customer_phone,
           s.customer_address, s.customer_email, s.item_description,
           s.service_details, s.price, s.status, s.created_at, s.finished_at,
           s.category_id, c.name AS category_name
    FROM services s
    LEFT JOIN categories c ON c.id = s.category_id
"""

# Columns an update only touches when the request carries a value.
PATCHABLE_FIELDS = (
    "customer_name",
    "customer_phone",
    "customer_address",
    "customer_email",
    "item_description",
    "service_details",
    "price",
)


def generate_receipt_number(now: Optional[datetime] = None) -> str:
    """Build a receipt number ``<year>-<6 digits>`` from the current instant.

    The suffix is the last six digits of the timestamp in milliseconds.
    The year is taken in UTC, the clock ``created_at`` is stored in.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{now.year}-{str(millis)[-6:]}"


def _is_receipt_collision(exc: StorageError) -> bool:
    cause = exc.__cause__
    return isinstance(cause, sqlite3.IntegrityError) and "receipt_number" in str(cause)


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required.")
    return value


class OrderService:
    """Service for managing service orders."""

    def __init__(self, db: Database, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @staticmethod
    def _filters(status: Optional[str], search: Optional[str]) -> Tuple[str, list]:
        # ``search`` is a literal substring: instr() gives ``%`` and ``_`` no meaning.
        clauses: list[str] = []
        params: list = []
        if status:
            clauses.append("s.status = ?")
            params.append(status)
        if search:
            needle = search.casefold()
            clauses.append(
                "(instr(casefold(s.customer_name), ?) > 0"
                " OR instr(casefold(s.item_description), ?) > 0"
                " OR instr(casefold(s.receipt_number), ?) > 0"
                " OR instr(casefold(COALESCE(c.name, '')), ?) > 0)"
            )
            params.extend([needle] * 4)
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        return where, params

    @staticmethod
    def _status_filter(status: Optional[str]) -> Optional[str]:
        if not status:
            return None
        try:
            return ServiceStatus(canonical_status(status)).value
        except ValueError:
            raise ValidationError(f"Unknown status: {status}") from None

    async def count_services(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> int:
        where, params = self._filters(status, search)
        with self.db.cursor() as cursor:
            row = cursor.execute(
                "SELECT COUNT(*) FROM services s"
                " LEFT JOIN categories c ON c.id = s.category_id" + where,
                tuple(params),
            ).fetchone()
        return row[0]

    async def fetch_page(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Return one page of services, most recent first."""
        where, params = self._filters(status, search)
        query = SELECT_SERVICE + where + " ORDER BY s.created_at DESC, s.id DESC LIMIT ? OFFSET ?"
        params.extend([limit, (page - 1) * limit])
        with self.db.cursor() as cursor:
            rows = cursor.execute(query, tuple(params)).fetchall()
        return [dict(row) for row in rows]

    async def list_services(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return a page of services plus pagination metadata.

        The page query and the count query are independent reads; a
        failure in either one fails the whole call.
        """
        limit = limit or self.settings.default_page_size
        if page < 1:
            raise ValidationError("page must be 1 or greater.")
        if limit < 1 or limit > self.settings.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.max_page_size}."
            )
        status = self._status_filter(status)
        rows = await self.fetch_page(page, limit, status=status, search=search)
        total = await self.count_services(status=status, search=search)
        return {
            "data": rows,
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit),
            },
        }

    async def get_service(self, service_id: int) -> Dict[str, Any]:
        with self.db.cursor() as cursor:
            row = cursor.execute(SELECT_SERVICE + " WHERE s.id = ?", (service_id,)).fetchone()
        if not row:
            raise NotFoundError(f"Service {service_id} not found")
        return dict(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create_service(self, data: ServiceCreate) -> Dict[str, Any]:
        """Insert a new service order and return it as stored.

        The receipt number, initial status and creation time are
        assigned here.  When the generated receipt number is already
        taken a new one is drawn, up to ``receipt_retry_attempts``
        times.
        """
        customer_name = _require_text(data.customer_name, "customer_name")
        item_description = _require_text(data.item_description, "item_description")
        price = data.price if data.price is not None else 0.0
        if price < 0:
            raise ValidationError("price must not be negative.")

        attempts = max(1, self.settings.receipt_retry_attempts)
        for attempt in range(1, attempts + 1):
            now = datetime.now(timezone.utc)
            receipt_number = generate_receipt_number(now)
            try:
                with self.db.cursor() as cursor:
                    cursor.execute(
                        """
                        INSERT INTO services (
                            receipt_number, customer_name, customer_phone,
                            customer_address, customer_email, item_description,
                            service_details, price, status, category_id, created_at
                        )
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            receipt_number,
                            customer_name,
                            data.customer_phone,
                            data.customer_address,
                            data.customer_email,
                            item_description,
                            data.service_details,
                            price,
                            INITIAL_STATUS.value,
                            data.category_id,
                            now.strftime("%Y-%m-%d %H:%M:%S"),
                        ),
                    )
                    service_id = cursor.lastrowid
            except StorageError as exc:
                if _is_receipt_collision(exc) and attempt < attempts:
                    logger.warning(
                        "Receipt number %s already taken, retrying (%s/%s)",
                        receipt_number,
                        attempt,
                        attempts,
                    )
                    # Let the millisecond clock move before drawing again.
                    await asyncio.sleep(0.001)
                    continue
                raise
            logger.info("Created service %s with receipt %s", service_id, receipt_number)
            return await self.get_service(service_id)
        # Unreachable: the last attempt either returns or raises.
        raise StorageError("Could not allocate a receipt number")

    async def update_service(self, service_id: int, data: ServiceUpdate) -> int:
        """Apply a partial update in one statement and return the row count.

        Omitted fields keep their value via ``COALESCE``; ``category_id``
        is always overwritten.  ``finished_at`` follows the status
        lifecycle described in the module docstring.  A missing id
        simply updates nothing and returns 0.
        """
        if data.customer_name is not None:
            _require_text(data.customer_name, "customer_name")
        if data.item_description is not None:
            _require_text(data.item_description, "item_description")
        if data.price is not None and data.price < 0:
            raise ValidationError("price must not be negative.")

        status = data.status.value if data.status is not None else None
        assignments = [f"{field} = COALESCE(?, {field})" for field in PATCHABLE_FIELDS]
        assignments.append("category_id = ?")
        assignments.append("status = COALESCE(?, status)")
        assignments.append(
            """finished_at = CASE
                WHEN ? IS NULL THEN finished_at
                WHEN ? IN (?, ?) THEN COALESCE(finished_at, CURRENT_TIMESTAMP)
                ELSE NULL
            END"""
        )
        params: list = [getattr(data, field) for field in PATCHABLE_FIELDS]
        params.append(data.category_id)
        params.append(status)
        params.extend([status, status, *(s.value for s in FINISHED_STATUSES)])
        params.append(service_id)

        with self.db.cursor() as cursor:
            cursor.execute(
                "UPDATE services SET " + ", ".join(assignments) + " WHERE id = ?",
                tuple(params),
            )
            changes = cursor.rowcount
        logger.info("Updated service %s (%s row(s) changed)", service_id, changes)
        return changes

    async def delete_service(self, service_id: int) -> int:
        """Delete a service order; returns 0 when the id does not exist."""
        with self.db.cursor() as cursor:
            cursor.execute("DELETE FROM services WHERE id = ?", (service_id,))
            changes = cursor.rowcount
        logger.info("Deleted service %s (%s row(s) changed)", service_id, changes)
        return changes
