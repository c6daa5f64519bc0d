from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.bin import BinCreate, BinDetail, BinResponse, BinSummary, BinUpdate
from app.schemas.common import SuccessResponse
from app.services import bin_service

router = APIRouter()


@router.get("", response_model=list[BinSummary], tags=["bins"])
def list_bins(
    principal: Principal = Depends(require_route("bins.list")),
    db: Session = Depends(get_db),
) -> list[BinSummary]:
    """
    Bins of the caller's account with manager details and ticket counters.
    """
    return bin_service.list_bins(db, principal.account_id)


@router.post(
    "",
    response_model=BinResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["bins"],
)
def create_bin(
    payload: BinCreate,
    principal: Principal = Depends(require_route("bins.create")),
    db: Session = Depends(get_db),
) -> BinResponse:
    return bin_service.create_bin(db, principal, payload)


@router.get("/{bin_id}", response_model=BinDetail, tags=["bins"])
def get_bin(
    bin_id: int,
    principal: Principal = Depends(require_route("bins.get")),
    db: Session = Depends(get_db),
) -> BinDetail:
    return bin_service.get_bin(db, principal, bin_id)


@router.put("/{bin_id}", response_model=BinResponse, tags=["bins"])
def update_bin(
    bin_id: int,
    payload: BinUpdate,
    principal: Principal = Depends(require_route("bins.update")),
    db: Session = Depends(get_db),
) -> BinResponse:
    return bin_service.update_bin(db, principal, bin_id, payload)


@router.delete("/{bin_id}", response_model=SuccessResponse, tags=["bins"])
def delete_bin(
    bin_id: int,
    principal: Principal = Depends(require_route("bins.delete")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """
    Soft delete. Refused while the bin still holds non-archived tickets.
    """
    bin_service.delete_bin(db, principal, bin_id)
    return SuccessResponse(success=True, message="Bin deleted")
