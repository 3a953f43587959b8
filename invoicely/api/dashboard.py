"""Dashboard API: month-over-month revenue in the reporting currency."""

from fastapi import APIRouter, Depends

from invoicely.api.deps import get_dashboard_service
from invoicely.core.auth import CurrentUser, get_current_user
from invoicely.services.dashboard import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    user: CurrentUser = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.get_dashboard(user.id)
