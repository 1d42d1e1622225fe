"""
Dashboard report endpoints.

``/productivity`` feeds the daily productivity chart, ``/summary``
the headline cards and ``/turnaround`` the deadline table.  The
productivity data is sparse: days with no services are not returned
and the chart fills the gaps itself.
"""

from fastapi import APIRouter, Depends

from bluedock_api.app.api.deps import get_dashboard_service
from bluedock_api.app.schemas.dashboard import (
    ProductivityResponse,
    SummaryResponse,
    TurnaroundResponse,
)
from bluedock_api.app.services.dashboard_service import DashboardService


router = APIRouter()


@router.get("/productivity", response_model=ProductivityResponse)
async def productivity(
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    return {"message": "success", "data": await service.productivity()}


@router.get("/summary", response_model=SummaryResponse)
async def summary(
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    """Return total services, revenue from completed work and counts per status."""
    return {"message": "success", "data": await service.summary()}


@router.get("/turnaround", response_model=TurnaroundResponse)
async def turnaround(
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    """List finished services created since the cut‑off with the days each one took."""
    return {"message": "success", "data": await service.turnaround()}
