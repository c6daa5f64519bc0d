# app/services/ticket_service.py
import logging

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, ValidationFailed
from app.core.permissions import Principal
from app.models.bin import Bin
from app.models.team import Team
from app.models.ticket import Ticket, TicketStatus
from app.models.user import User
from app.schemas.ticket import TicketCreate, TicketUpdate
from app.services import activity_service
from app.services.dashboard_service import invalidate_dashboard_cache
from app.services.permission_service import can_access_bin
from app.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

settings = get_settings()


def list_tickets(db: Session, account_id: int) -> list[Ticket]:
    return (
        db.query(Ticket)
        .filter(Ticket.account_id == account_id)
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
        .all()
    )


def get_ticket(db: Session, account_id: int, ticket_id: int) -> Ticket:
    """
    A ticket of another account is reported as missing.
    """
    ticket = (
        db.query(Ticket)
        .filter(Ticket.id == ticket_id, Ticket.account_id == account_id)
        .first()
    )
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


def _ensure_in_account(db: Session, model, object_id: int, account_id: int, label: str) -> None:
    exists = (
        db.query(model.id)
        .filter(model.id == object_id, model.account_id == account_id)
        .first()
    )
    if not exists:
        raise ValidationFailed(f"{label} not found in this account")


def create_ticket(db: Session, principal: Principal, payload: TicketCreate) -> Ticket:
    if payload.bin_id is not None:
        _ensure_in_account(db, Bin, payload.bin_id, principal.account_id, "Bin")
    if payload.team_id is not None:
        _ensure_in_account(db, Team, payload.team_id, principal.account_id, "Team")

    ticket = Ticket(
        account_id=principal.account_id,
        subject=payload.subject,
        content=payload.content,
        status=TicketStatus.OPEN,
        priority=payload.priority,
        requester_id=principal.id,
        bin_id=payload.bin_id,
        team_id=payload.team_id,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    invalidate_dashboard_cache(principal.account_id)
    return ticket


def update_ticket(db: Session, principal: Principal, ticket_id: int, payload: TicketUpdate) -> Ticket:
    ticket = get_ticket(db, principal.account_id, ticket_id)

    if payload.status is not None:
        ticket.status = payload.status
    if payload.priority is not None:
        ticket.priority = payload.priority
    if payload.assignee_id is not None:
        _ensure_in_account(db, User, payload.assignee_id, principal.account_id, "Assignee")
        ticket.assignee_id = payload.assignee_id

    ticket.updated_at = utc_now()
    db.commit()
    db.refresh(ticket)
    invalidate_dashboard_cache(principal.account_id)
    return ticket


def archive_ticket(db: Session, principal: Principal, ticket_id: int) -> Ticket:
    ticket = get_ticket(db, principal.account_id, ticket_id)

    now = utc_now()
    ticket.status = TicketStatus.ARCHIVED
    ticket.archived_at = now
    ticket.updated_at = now
    db.commit()
    db.refresh(ticket)
    invalidate_dashboard_cache(principal.account_id)
    return ticket


def transfer_ticket(
    db: Session,
    principal: Principal,
    ticket_id: int,
    to_bin_id: int,
    reason: str | None = None,
) -> Ticket:
    """
    Move a ticket into another active bin of the same account.

    With settings.enforce_bin_scope the caller must also be able to access
    the target bin; an inaccessible bin is reported as missing.
    """
    ticket = get_ticket(db, principal.account_id, ticket_id)

    target = (
        db.query(Bin)
        .filter(Bin.id == to_bin_id, Bin.account_id == principal.account_id)
        .first()
    )
    if not target:
        raise NotFoundError("Bin not found")
    if settings.enforce_bin_scope and not can_access_bin(db, principal.id, target.id):
        raise NotFoundError("Bin not found")
    if not target.is_active:
        raise ValidationFailed("Cannot transfer to an inactive bin")
    if ticket.bin_id == target.id:
        raise ValidationFailed("Ticket is already in this bin")

    from_bin_id = ticket.bin_id
    ticket.bin_id = target.id
    ticket.updated_at = utc_now()

    details = f"Ticket {ticket.id} moved from bin {from_bin_id} to bin {target.id}"
    if reason:
        details = f"{details}: {reason}"
    activity_service.record_activity(
        db,
        account_id=principal.account_id,
        user_id=principal.id,
        action=activity_service.TRANSFER_TICKET,
        details=details,
    )
    db.commit()
    db.refresh(ticket)
    logger.info("User %s transferred ticket %s to bin %s", principal.id, ticket.id, target.id)
    return ticket
