"""Pydantic models for the dashboard reports."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ProductivityRow(BaseModel):
    """Counts for one calendar day; days without services are absent."""

    date: str = Field(..., examples=["2025-11-28"])
    total: int
    concluidos: int
    prontos: int


class ProductivityResponse(BaseModel):
    message: str = "success"
    data: List[ProductivityRow]


class DashboardSummary(BaseModel):
    total_services: int
    total_revenue: float
    status_counts: Dict[str, int]


class SummaryResponse(BaseModel):
    message: str = "success"
    data: DashboardSummary


class TurnaroundRow(BaseModel):
    """A finished service with the time it took, for the deadline table."""

    id: int
    receipt_number: str
    item_description: str
    status: str
    created_at: str
    finished_at: Optional[str] = None
    elapsed_days: Optional[int] = None
    elapsed_label: str = Field(..., examples=["Mesmo dia", "1 dia", "3 dias"])


class TurnaroundResponse(BaseModel):
    message: str = "success"
    data: List[TurnaroundRow]
