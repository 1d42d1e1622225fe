"""
FastAPI dependencies shared by the endpoint modules.

The database and settings live on ``app.state`` (set by
``create_app``); these helpers build the service objects from them for
each request.
"""

from fastapi import Depends, Request

from bluedock_api.app.core.config import Settings
from bluedock_api.app.core.db import Database, get_db
from bluedock_api.app.services.category_service import CategoryService
from bluedock_api.app.services.dashboard_service import DashboardService
from bluedock_api.app.services.order_service import OrderService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_order_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(db, settings)


def get_category_service(db: Database = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_dashboard_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(db, settings)
