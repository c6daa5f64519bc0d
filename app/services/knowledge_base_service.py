# app/services/knowledge_base_service.py
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationFailed
from app.core.permissions import Principal
from app.models.knowledge_base import KnowledgeBaseItem
from app.models.ticket import Ticket
from app.schemas.knowledge_base import KBItemCreate


def list_items(db: Session, account_id: int) -> list[KnowledgeBaseItem]:
    return (
        db.query(KnowledgeBaseItem)
        .filter(KnowledgeBaseItem.account_id == account_id)
        .order_by(KnowledgeBaseItem.created_at.desc(), KnowledgeBaseItem.id.desc())
        .all()
    )


def get_item(db: Session, account_id: int, item_id: int) -> KnowledgeBaseItem:
    item = (
        db.query(KnowledgeBaseItem)
        .filter(KnowledgeBaseItem.id == item_id, KnowledgeBaseItem.account_id == account_id)
        .first()
    )
    if not item:
        raise NotFoundError("KB item not found")
    return item


def create_item(db: Session, principal: Principal, payload: KBItemCreate) -> KnowledgeBaseItem:
    if payload.source_ticket_id is not None:
        source = (
            db.query(Ticket.id)
            .filter(Ticket.id == payload.source_ticket_id, Ticket.account_id == principal.account_id)
            .first()
        )
        if not source:
            raise ValidationFailed("Source ticket not found in this account")

    item = KnowledgeBaseItem(
        account_id=principal.account_id,
        author_id=principal.id,
        title=payload.title,
        content=payload.content,
        category=payload.category,
        source_ticket_id=payload.source_ticket_id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, account_id: int, item_id: int) -> None:
    item = get_item(db, account_id, item_id)
    db.delete(item)
    db.commit()
