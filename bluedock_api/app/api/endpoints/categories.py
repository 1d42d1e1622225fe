"""Category endpoints."""

from fastapi import APIRouter, Depends

from bluedock_api.app.api.deps import get_category_service
from bluedock_api.app.schemas.category import CategoryListResponse
from bluedock_api.app.services.category_service import CategoryService


router = APIRouter()


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> dict:
    """Return all categories ordered by name."""
    return {"message": "success", "data": await service.list_categories()}
