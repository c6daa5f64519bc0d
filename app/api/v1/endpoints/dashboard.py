# app/api/v1/endpoints/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import get_dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats, tags=["dashboard"])
def get_stats(
    principal: Principal = Depends(require_route("dashboard.stats")),
    db: Session = Depends(get_db),
) -> DashboardStats:
    """
    Ticket counters for the caller's account. "Today" means the current UTC day.
    Cached briefly in Redis when it is configured.
    """
    return get_dashboard_stats(db, principal.account_id)
