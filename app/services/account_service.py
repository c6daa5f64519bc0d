# app/services/account_service.py
"""
Account (tenant) administration. Only reachable by superadmins.

Deleting an account removes every row it owns through ON DELETE CASCADE
foreign keys; nothing is deleted row by row here.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import commit_or_conflict
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.permissions import Principal
from app.models.account import Account
from app.models.bin import Bin
from app.models.ticket import Ticket
from app.models.user import User
from app.schemas.account import AccountCreate, AccountResponse, AccountUpdate

logger = logging.getLogger(__name__)

settings = get_settings()

DUPLICATE_NAME = "Account name already exists"


def _count_by_account(db: Session, model, account_ids: list[int]) -> dict[int, int]:
    if not account_ids:
        return {}
    rows = (
        db.query(model.account_id, func.count(model.id))
        .filter(model.account_id.in_(account_ids))
        .group_by(model.account_id)
        .all()
    )
    return dict(rows)


def list_accounts(db: Session) -> list[AccountResponse]:
    accounts = db.query(Account).order_by(Account.created_at.desc(), Account.id.desc()).all()
    ids = [a.id for a in accounts]
    users = _count_by_account(db, User, ids)
    tickets = _count_by_account(db, Ticket, ids)

    result = []
    for account in accounts:
        item = AccountResponse.model_validate(account)
        item.user_count = users.get(account.id, 0)
        item.ticket_count = tickets.get(account.id, 0)
        result.append(item)
    return result


def _load_account(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")
    return account


def get_account(db: Session, account_id: int) -> AccountResponse:
    account = _load_account(db, account_id)
    item = AccountResponse.model_validate(account)
    item.user_count = _count_by_account(db, User, [account.id]).get(account.id, 0)
    item.ticket_count = _count_by_account(db, Ticket, [account.id]).get(account.id, 0)
    item.bin_count = _count_by_account(db, Bin, [account.id]).get(account.id, 0)
    return item


def create_account(db: Session, principal: Principal, payload: AccountCreate) -> Account:
    if db.query(Account.id).filter(Account.name == payload.name).first():
        raise ConflictError(DUPLICATE_NAME)

    account = Account(
        name=payload.name,
        display_name=payload.display_name,
        settings=payload.settings or {},
        is_active=True,
        created_by=principal.id,
    )
    db.add(account)
    commit_or_conflict(db, DUPLICATE_NAME)
    db.refresh(account)
    logger.info("User %s created account %s (%s)", principal.id, account.id, account.name)
    return account


def update_account(db: Session, principal: Principal, account_id: int, payload: AccountUpdate) -> Account:
    account = _load_account(db, account_id)

    if payload.display_name is not None:
        account.display_name = payload.display_name
    if payload.is_active is not None:
        account.is_active = payload.is_active
    if payload.settings is not None:
        account.settings = payload.settings

    db.commit()
    db.refresh(account)
    logger.info("User %s updated account %s", principal.id, account.id)
    return account


def delete_account(db: Session, principal: Principal, account_id: int) -> None:
    if account_id == settings.default_account_id:
        raise ValidationFailed("Cannot delete the default account")

    account = _load_account(db, account_id)
    name = account.name
    db.delete(account)
    db.commit()
    logger.info("User %s deleted account %s (%s)", principal.id, account_id, name)
