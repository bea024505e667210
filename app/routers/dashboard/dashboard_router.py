from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.dashboard.dashboard_schemas import CustomerDashboardStats, AdminDashboardStats
from app.services.dashboard.dashboard_service import (
    get_customer_dashboard_stats,
    get_admin_dashboard_stats,
)
from app.utils.check_roles import require_role
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=APIResponse[CustomerDashboardStats])
async def customer_dashboard_stats_api(
    db: AsyncSession = Depends(get_db),
    customer=Depends(require_role(["customer"])),
):
    stats = await get_customer_dashboard_stats(db, customer)
    return success_response("Dashboard stats fetched", stats)


@router.get("/admin-stats", response_model=APIResponse[AdminDashboardStats])
async def admin_dashboard_stats_api(
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_role(["admin"])),
):
    stats = await get_admin_dashboard_stats(db)
    return success_response("Dashboard stats fetched", stats)
