"""Dashboard analytics for the signed-in user."""

from fastapi import APIRouter, Depends

from ....application.services.analytics_service import DEFAULT_PERIOD, AnalyticsService
from ....core.dependencies import get_analytics_service
from ....domain.models import User
from ..dependencies import get_current_user
from ..schemas.transaction_schemas import DashboardResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    period: str = DEFAULT_PERIOD,
    user: User = Depends(get_current_user),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> DashboardResponse:
    return DashboardResponse.from_domain(analytics_service.dashboard(user, period))
