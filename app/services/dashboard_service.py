# app/services/dashboard_service.py
import json
import logging

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.redis import cache_delete, cache_get, cache_set
from app.models.ticket import Ticket, TicketStatus
from app.schemas.dashboard import DashboardStats
from app.utils.datetime_utils import utc_day_bounds

logger = logging.getLogger(__name__)

settings = get_settings()


def _cache_key(account_id: int) -> str:
    return f"dashboard:account:{account_id}:stats"


def invalidate_dashboard_cache(account_id: int) -> None:
    """Called after any ticket write so the next read recomputes."""
    cache_delete(_cache_key(account_id))


def compute_stats(db: Session, account_id: int) -> DashboardStats:
    """
    Ticket counters for one account. "Today" is the current UTC calendar day.
    """
    today_start, today_end = utc_day_bounds()

    def count(*criteria) -> int:
        return (
            db.query(func.count(Ticket.id))
            .filter(Ticket.account_id == account_id, *criteria)
            .scalar()
            or 0
        )

    created_today = (Ticket.created_at >= today_start, Ticket.created_at < today_end)

    return DashboardStats(
        total_tickets_created=count(Ticket.status != TicketStatus.ARCHIVED),
        total_tickets_archived=count(Ticket.status == TicketStatus.ARCHIVED),
        tickets_created_today=count(*created_today),
        tickets_open_today=count(Ticket.status == TicketStatus.OPEN, *created_today),
        tickets_open=count(Ticket.status == TicketStatus.OPEN),
        tickets_archived_today=count(
            Ticket.status == TicketStatus.ARCHIVED,
            Ticket.archived_at >= today_start,
            Ticket.archived_at < today_end,
        ),
    )


def get_dashboard_stats(db: Session, account_id: int) -> DashboardStats:
    """
    Cached for settings.dashboard_cache_ttl seconds when Redis is available.
    """
    cache_key = _cache_key(account_id)
    cached = cache_get(cache_key)
    if cached:
        try:
            return DashboardStats(**json.loads(cached))
        except (ValueError, ValidationError):
            logger.warning("Dashboard cache corrupted. Recomputing.", exc_info=True)

    stats = compute_stats(db, account_id)
    cache_set(cache_key, stats.model_dump_json(), ttl=settings.dashboard_cache_ttl)
    return stats
