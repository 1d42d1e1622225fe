"""
Service order endpoints.

CRUD routes for the ``services`` table plus the paginated listing used
by the dashboard.  Handlers only translate between HTTP and
``OrderService``; validation and storage errors raised by the service
are turned into ``{"error": ...}`` responses by the handlers
registered in ``main.py``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from bluedock_api.app.api.deps import get_order_service
from bluedock_api.app.schemas.service import (
    ChangesResponse,
    ServiceCreate,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)
from bluedock_api.app.services.order_service import OrderService


router = APIRouter()


@router.get("", response_model=ServiceListResponse)
async def list_services(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: Optional[int] = Query(None, ge=1, description="Page size; defaults to DEFAULT_PAGE_SIZE"),
    status_filter: Optional[str] = Query(None, alias="status", description="Only services in this status (Em Manutenção is read as Em Andamento)"),
    search: Optional[str] = Query(None, description="Case-insensitive match on customer, item, receipt or category"),
    service: OrderService = Depends(get_order_service),
) -> dict:
    """List services, most recent first, with pagination metadata.

    - **page**, **limit**: pagination; ``meta.totalPages`` is
      ``ceil(total / limit)``.
    - **status**, **search**: optional filters; ``meta.total`` counts
      the filtered rows.
    """
    result = await service.list_services(
        page=page,
        limit=limit,
        status=status_filter,
        search=search,
    )
    return {"message": "success", **result}


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(
    service_id: int,
    service: OrderService = Depends(get_order_service),
) -> dict:
    """Retrieve a single service by id; 404 when it does not exist."""
    return {"message": "success", "data": await service.get_service(service_id)}


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    service: OrderService = Depends(get_order_service),
) -> dict:
    """Create a service order.

    ``customer_name`` and ``item_description`` are required.  The
    receipt number, the initial status and ``created_at`` are assigned
    by the server and returned with the record.
    """
    return {"message": "success", "data": await service.create_service(payload)}


@router.put("/{service_id}", response_model=ChangesResponse)
async def update_service(
    service_id: int,
    payload: ServiceUpdate,
    service: OrderService = Depends(get_order_service),
) -> dict:
    """Partially update a service.

    Omitted fields are left unchanged, except ``category_id`` which is
    always replaced by the value sent (``null`` when omitted).
    ``changes`` is 0 when the id does not exist.
    """
    changes = await service.update_service(service_id, payload)
    return {"message": "success", "changes": changes}


@router.delete("/{service_id}", response_model=ChangesResponse)
async def delete_service(
    service_id: int,
    service: OrderService = Depends(get_order_service),
) -> dict:
    """Delete a service permanently; ``changes`` is 0 for an unknown id."""
    changes = await service.delete_service(service_id)
    return {"message": "deleted", "changes": changes}
