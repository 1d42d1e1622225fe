"""
Pydantic models for service orders.

``ServiceCreate`` and ``ServiceUpdate`` describe request bodies;
``ServiceRead`` is the record returned by every read, joined with
its category name.  The ``ServiceStatus`` enumeration lists the
workflow states in the order a repair normally moves through them,
although any state may be set directly.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class ServiceStatus(str, Enum):
    QUOTE_PENDING = "Em Orçamento"
    AWAITING_APPROVAL = "Aguardando Aprovação"
    PENDING = "Pendente"
    IN_PROGRESS = "Em Andamento"
    AWAITING_PART = "Aguardando Peça"
    PART_UNAVAILABLE = "Peça Indisponível"
    READY = "Pronto"
    COMPLETED = "Concluído"
    CANCELLED = "Cancelado"


INITIAL_STATUS = ServiceStatus.PENDING

# Entering one of these states stamps ``finished_at``; leaving them clears it.
FINISHED_STATUSES = (ServiceStatus.READY, ServiceStatus.COMPLETED)

# Older names still sent by some clients; stored under the canonical state.
STATUS_ALIASES = {
    "Em Manutenção": ServiceStatus.IN_PROGRESS,
}


def canonical_status(value: Any) -> Any:
    """Replace a status alias with its canonical value; other input is returned as is."""
    if isinstance(value, str) and value in STATUS_ALIASES:
        return STATUS_ALIASES[value].value
    return value


class ServiceBase(BaseModel):
    customer_name: Optional[str] = Field(None, examples=["Ana"])
    customer_phone: Optional[str] = Field(None, examples=["+55 11 91234-5678"])
    customer_address: Optional[str] = Field(None, examples=["Rua das Flores, 10"])
    customer_email: Optional[str] = Field(None, examples=["ana@example.com"])
    item_description: Optional[str] = Field(None, examples=["Reel repair"])
    service_details: Optional[str] = Field(None, examples=["Replace drag washers"])


class ServiceCreate(ServiceBase):
    """Schema for creating a service order.

    ``customer_name`` and ``item_description`` are checked by
    ``OrderService`` so that a missing value produces a readable 400
    instead of a schema error.  ``price`` and ``category_id`` are
    lenient: a value that cannot be read as a number falls back to
    the default (0 and no category respectively).
    """

    price: Optional[float] = Field(None, examples=[150.0])
    category_id: Optional[int] = Field(None, examples=[1])

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("category_id", mode="before")
    @classmethod
    def _coerce_category_id(cls, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class ServiceUpdate(ServiceBase):
    """Schema for a partial update.

    Every field is optional and omitted fields keep their stored
    value, except ``category_id``: it is always written, so sending
    ``null`` (or leaving it out) removes the category.
    """

    price: Optional[float] = None
    status: Optional[ServiceStatus] = None
    category_id: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def _resolve_status_alias(cls, value: Any) -> Any:
        return canonical_status(value)


class ServiceRead(BaseModel):
    id: int
    receipt_number: str
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    customer_email: Optional[str] = None
    item_description: str
    service_details: Optional[str] = None
    price: float
    status: str
    created_at: str
    finished_at: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class ServiceListResponse(BaseModel):
    message: str = "success"
    data: List[ServiceRead]
    meta: PageMeta


class ServiceResponse(BaseModel):
    message: str = "success"
    data: ServiceRead


class ChangesResponse(BaseModel):
    message: str = "success"
    changes: int
