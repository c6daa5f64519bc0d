from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.common import SuccessResponse
from app.schemas.knowledge_base import KBItemCreate, KBItemResponse
from app.services import knowledge_base_service

router = APIRouter()


@router.get("", response_model=list[KBItemResponse], tags=["knowledge-base"])
def list_kb_items(
    principal: Principal = Depends(require_route("kb.list")),
    db: Session = Depends(get_db),
) -> list[KBItemResponse]:
    return knowledge_base_service.list_items(db, principal.account_id)


@router.post(
    "",
    response_model=KBItemResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["knowledge-base"],
)
def create_kb_item(
    payload: KBItemCreate,
    principal: Principal = Depends(require_route("kb.create")),
    db: Session = Depends(get_db),
) -> KBItemResponse:
    return knowledge_base_service.create_item(db, principal, payload)


@router.get("/{item_id}", response_model=KBItemResponse, tags=["knowledge-base"])
def get_kb_item(
    item_id: int,
    principal: Principal = Depends(require_route("kb.get")),
    db: Session = Depends(get_db),
) -> KBItemResponse:
    return knowledge_base_service.get_item(db, principal.account_id, item_id)


@router.delete("/{item_id}", response_model=SuccessResponse, tags=["knowledge-base"])
def delete_kb_item(
    item_id: int,
    principal: Principal = Depends(require_route("kb.delete")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    knowledge_base_service.delete_item(db, principal.account_id, item_id)
    return SuccessResponse(success=True)
