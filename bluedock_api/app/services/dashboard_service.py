"""
Service layer for dashboard reports.

Three read‑only reports are provided: a per‑day productivity report
(services created, completed and ready on each calendar day since a
cut‑off date), an overall summary with revenue and a count per status,
and a turnaround report giving the time each finished service took.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from bluedock_api.app.core.config import Settings
from bluedock_api.app.core.db import Database
from bluedock_api.app.schemas.service import FINISHED_STATUSES, ServiceStatus


def elapsed_days(created_at: str, finished_at: Optional[str]) -> Optional[int]:
    """Whole days from ``created_at`` to ``finished_at``, rounded down."""
    if not finished_at:
        return None
    delta = datetime.fromisoformat(finished_at) - datetime.fromisoformat(created_at)
    return delta.days


def elapsed_label(days: Optional[int]) -> str:
    if days is None:
        return "Em andamento"
    if days == 0:
        return "Mesmo dia"
    if days == 1:
        return "1 dia"
    return f"{days} dias"


class DashboardService:
    """Service providing aggregated metrics for the dashboard."""

    def __init__(self, db: Database, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    async def productivity(self) -> List[Dict[str, Any]]:
        """Return one row per day with services created on or after the cut‑off.

        Each row holds the ISO ``date``, the ``total`` created that day
        and how many of those are currently ``Concluído`` (``concluidos``)
        or ``Pronto`` (``prontos``).  Days without services do not
        appear; the result is ordered by date.
        """
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                """
                SELECT date(created_at) AS date,
                       COUNT(*) AS total,
                       SUM(CASE WHEN status = ? THEN 1 ELSE 0 END) AS concluidos,
                       SUM(CASE WHEN status = ? THEN 1 ELSE 0 END) AS prontos
                FROM services
                WHERE date(created_at) >= date(?)
                GROUP BY date(created_at)
                ORDER BY date(created_at) ASC
                """,
                (
                    ServiceStatus.COMPLETED.value,
                    ServiceStatus.READY.value,
                    self.settings.productivity_start_date,
                ),
            ).fetchall()
        return [dict(row) for row in rows]

    async def summary(self) -> Dict[str, Any]:
        """Return the headline numbers shown on the dashboard cards.

        ``total_revenue`` sums the price of completed services and
        ``status_counts`` has an entry for every status, zero included.
        """
        status_counts = {status.value: 0 for status in ServiceStatus}
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                "SELECT status, COUNT(*) AS count FROM services GROUP BY status"
            ).fetchall()
            revenue = cursor.execute(
                "SELECT COALESCE(SUM(price), 0) FROM services WHERE status = ?",
                (ServiceStatus.COMPLETED.value,),
            ).fetchone()[0]
        for row in rows:
            status_counts[row["status"]] = row["count"]
        return {
            "total_services": sum(status_counts.values()),
            "total_revenue": float(revenue),
            "status_counts": status_counts,
        }

    async def turnaround(self) -> List[Dict[str, Any]]:
        """Return the finished services created on or after the cut‑off.

        Only services currently ``Pronto`` or ``Concluído`` are listed,
        most recent first.  ``elapsed_days`` is the number of whole days
        between ``created_at`` and ``finished_at``; ``elapsed_label`` is
        the text shown in the deadline table.
        """
        with self.db.cursor() as cursor:
            rows = cursor.execute(
                """
                SELECT id, receipt_number, item_description, status,
                       created_at, finished_at
                FROM services
                WHERE date(created_at) >= date(?) AND status IN (?, ?)
                ORDER BY created_at DESC, id DESC
                """,
                (
                    self.settings.productivity_start_date,
                    *(status.value for status in FINISHED_STATUSES),
                ),
            ).fetchall()
        report = []
        for row in rows:
            item = dict(row)
            item["elapsed_days"] = elapsed_days(item["created_at"], item["finished_at"])
            item["elapsed_label"] = elapsed_label(item["elapsed_days"])
            report.append(item)
        return report
