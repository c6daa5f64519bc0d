# app/services/bin_service.py
"""
Bin management. Bins are soft deleted; a bin still holding non-archived
tickets cannot be deleted.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import commit_or_conflict
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.permissions import Principal
from app.models.bin import DEFAULT_BIN_COLOR, Bin
from app.models.ticket import Ticket, TicketStatus
from app.models.user import User
from app.schemas.bin import BinCreate, BinDetail, BinSummary, BinUpdate
from app.services.permission_service import can_access_bin

logger = logging.getLogger(__name__)

settings = get_settings()

DUPLICATE_NAME = "Bin name already exists for this account"


def _ticket_counts(db: Session, bin_ids: list[int]) -> dict[int, dict[TicketStatus, int]]:
    if not bin_ids:
        return {}
    rows = (
        db.query(Ticket.bin_id, Ticket.status, func.count(Ticket.id))
        .filter(Ticket.bin_id.in_(bin_ids))
        .group_by(Ticket.bin_id, Ticket.status)
        .all()
    )
    counts: dict[int, dict[TicketStatus, int]] = {bin_id: {} for bin_id in bin_ids}
    for bin_id, ticket_status, n in rows:
        counts[bin_id][TicketStatus(ticket_status)] = n
    return counts


def _summary_fields(bin_obj: Bin, manager: User | None, counts: dict[TicketStatus, int]) -> dict:
    total = sum(counts.values())
    return {
        "id": bin_obj.id,
        "name": bin_obj.name,
        "description": bin_obj.description,
        "manager_id": bin_obj.manager_id,
        "is_active": bin_obj.is_active,
        "color": bin_obj.color,
        "created_at": bin_obj.created_at,
        "manager_name": manager.full_name if manager else None,
        "manager_email": manager.email if manager else None,
        "active_tickets": total - counts.get(TicketStatus.ARCHIVED, 0),
        "open_tickets": counts.get(TicketStatus.OPEN, 0),
        "in_progress_tickets": counts.get(TicketStatus.IN_PROGRESS, 0),
        "total_tickets": total,
        "closed_tickets": counts.get(TicketStatus.CLOSED, 0),
    }


def _load_bin(db: Session, principal: Principal, bin_id: int) -> Bin:
    """
    Bins of other accounts are reported as missing, as are bins outside the
    caller's scope when settings.enforce_bin_scope is on.
    """
    bin_obj = (
        db.query(Bin)
        .filter(Bin.id == bin_id, Bin.account_id == principal.account_id)
        .first()
    )
    if not bin_obj:
        raise NotFoundError("Bin not found")
    if settings.enforce_bin_scope and not can_access_bin(db, principal.id, bin_obj.id):
        raise NotFoundError("Bin not found")
    return bin_obj


def _validate_manager(db: Session, account_id: int, manager_id: int | None) -> None:
    if manager_id is None:
        return
    manager = (
        db.query(User.id)
        .filter(User.id == manager_id, User.account_id == account_id)
        .first()
    )
    if not manager:
        raise ValidationFailed("Manager must be a user of this account")


def list_bins(db: Session, account_id: int) -> list[BinSummary]:
    rows = (
        db.query(Bin, User)
        .outerjoin(User, Bin.manager_id == User.id)
        .filter(Bin.account_id == account_id)
        .order_by(Bin.name)
        .all()
    )
    counts = _ticket_counts(db, [b.id for b, _ in rows])
    return [BinSummary(**_summary_fields(b, manager, counts[b.id])) for b, manager in rows]


def get_bin(db: Session, principal: Principal, bin_id: int) -> BinDetail:
    bin_obj = _load_bin(db, principal, bin_id)
    manager = db.get(User, bin_obj.manager_id) if bin_obj.manager_id else None
    counts = _ticket_counts(db, [bin_obj.id])
    return BinDetail(**_summary_fields(bin_obj, manager, counts[bin_obj.id]))


def create_bin(db: Session, principal: Principal, payload: BinCreate) -> Bin:
    _validate_manager(db, principal.account_id, payload.manager_id)

    existing = (
        db.query(Bin.id)
        .filter(Bin.account_id == principal.account_id, Bin.name == payload.name)
        .first()
    )
    if existing:
        raise ConflictError(DUPLICATE_NAME)

    bin_obj = Bin(
        account_id=principal.account_id,
        name=payload.name,
        description=payload.description,
        manager_id=payload.manager_id,
        color=payload.color or DEFAULT_BIN_COLOR,
        is_active=True,
        created_by=principal.id,
    )
    db.add(bin_obj)
    commit_or_conflict(db, DUPLICATE_NAME)
    db.refresh(bin_obj)
    logger.info("User %s created bin %s (%s)", principal.id, bin_obj.id, bin_obj.name)
    return bin_obj


def update_bin(db: Session, principal: Principal, bin_id: int, payload: BinUpdate) -> Bin:
    fields = payload.model_fields_set
    if not fields:
        raise ValidationFailed("No updates provided")

    bin_obj = _load_bin(db, principal, bin_id)

    if "manager_id" in fields:
        _validate_manager(db, principal.account_id, payload.manager_id)
        bin_obj.manager_id = payload.manager_id
    if "name" in fields and payload.name is not None:
        bin_obj.name = payload.name
    if "description" in fields:
        bin_obj.description = payload.description
    if "is_active" in fields and payload.is_active is not None:
        bin_obj.is_active = payload.is_active
    if "color" in fields and payload.color is not None:
        bin_obj.color = payload.color

    commit_or_conflict(db, DUPLICATE_NAME)
    db.refresh(bin_obj)
    logger.info("User %s updated bin %s", principal.id, bin_obj.id)
    return bin_obj


def delete_bin(db: Session, principal: Principal, bin_id: int) -> None:
    bin_obj = _load_bin(db, principal, bin_id)

    remaining = (
        db.query(func.count(Ticket.id))
        .filter(Ticket.bin_id == bin_obj.id, Ticket.status != TicketStatus.ARCHIVED)
        .scalar()
        or 0
    )
    if remaining:
        raise ValidationFailed(
            f"Cannot delete bin with {remaining} active tickets",
            details="Please transfer or archive all tickets first",
        )

    bin_obj.is_active = False
    db.commit()
    logger.info("User %s deleted bin %s", principal.id, bin_obj.id)
