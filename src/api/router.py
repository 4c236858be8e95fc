from __future__ import annotations

from fastapi import APIRouter

from src.api.health import router as health_router
from src.api.large_accounts import router as large_accounts_router
from src.api.sales_analytics import router as sales_analytics_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(sales_analytics_router)
api_router.include_router(large_accounts_router)
