from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.bin import TransferTicketRequest
from app.schemas.common import SuccessResponse
from app.schemas.ticket import TicketCreate, TicketResponse, TicketUpdate
from app.services import ticket_service

router = APIRouter()


@router.get("", response_model=list[TicketResponse], tags=["tickets"])
def list_tickets(
    principal: Principal = Depends(require_route("tickets.list")),
    db: Session = Depends(get_db),
) -> list[TicketResponse]:
    """
    All tickets of the caller's account, newest first.
    """
    return ticket_service.list_tickets(db, principal.account_id)


@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["tickets"],
)
def create_ticket(
    payload: TicketCreate,
    principal: Principal = Depends(require_route("tickets.create")),
    db: Session = Depends(get_db),
) -> TicketResponse:
    return ticket_service.create_ticket(db, principal, payload)


@router.get("/{ticket_id}", response_model=TicketResponse, tags=["tickets"])
def get_ticket(
    ticket_id: int,
    principal: Principal = Depends(require_route("tickets.get")),
    db: Session = Depends(get_db),
) -> TicketResponse:
    return ticket_service.get_ticket(db, principal.account_id, ticket_id)


@router.put("/{ticket_id}", response_model=TicketResponse, tags=["tickets"])
def update_ticket(
    ticket_id: int,
    payload: TicketUpdate,
    principal: Principal = Depends(require_route("tickets.update")),
    db: Session = Depends(get_db),
) -> TicketResponse:
    """
    Update status, priority and/or assignee. Omitted fields are left alone.
    """
    return ticket_service.update_ticket(db, principal, ticket_id, payload)


@router.post("/{ticket_id}/archive", response_model=TicketResponse, tags=["tickets"])
def archive_ticket(
    ticket_id: int,
    principal: Principal = Depends(require_route("tickets.archive")),
    db: Session = Depends(get_db),
) -> TicketResponse:
    return ticket_service.archive_ticket(db, principal, ticket_id)


@router.post("/{ticket_id}/transfer", response_model=SuccessResponse, tags=["tickets"])
def transfer_ticket(
    ticket_id: int,
    payload: TransferTicketRequest,
    principal: Principal = Depends(require_route("tickets.transfer")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """
    Move a ticket to another bin of the same account.
    """
    ticket_service.transfer_ticket(db, principal, ticket_id, payload.to_bin_id, payload.reason)
    return SuccessResponse(success=True, message="Ticket transferred successfully")
