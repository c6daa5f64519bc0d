from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.account import AccountCreate, AccountResponse, AccountUpdate
from app.schemas.common import SuccessResponse
from app.services import account_service

router = APIRouter()


@router.get("", response_model=list[AccountResponse], tags=["accounts"])
def list_accounts(
    principal: Principal = Depends(require_route("accounts.list")),
    db: Session = Depends(get_db),
) -> list[AccountResponse]:
    """
    All accounts with user and ticket counts, newest first. Superadmin only.
    """
    return account_service.list_accounts(db)


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["accounts"],
)
def create_account(
    payload: AccountCreate,
    principal: Principal = Depends(require_route("accounts.create")),
    db: Session = Depends(get_db),
) -> AccountResponse:
    return account_service.create_account(db, principal, payload)


@router.get("/{account_id}", response_model=AccountResponse, tags=["accounts"])
def get_account(
    account_id: int,
    principal: Principal = Depends(require_route("accounts.get")),
    db: Session = Depends(get_db),
) -> AccountResponse:
    return account_service.get_account(db, account_id)


@router.put("/{account_id}", response_model=AccountResponse, tags=["accounts"])
def update_account(
    account_id: int,
    payload: AccountUpdate,
    principal: Principal = Depends(require_route("accounts.update")),
    db: Session = Depends(get_db),
) -> AccountResponse:
    return account_service.update_account(db, principal, account_id, payload)


@router.delete("/{account_id}", response_model=SuccessResponse, tags=["accounts"])
def delete_account(
    account_id: int,
    principal: Principal = Depends(require_route("accounts.delete")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """
    Delete an account and everything it owns. The default account cannot be deleted.
    """
    account_service.delete_account(db, principal, account_id)
    return SuccessResponse(success=True, message="Account deleted")
