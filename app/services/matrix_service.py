# app/services/matrix_service.py
"""
Permissions matrix: direct per-user grants plus bin and team assignments,
read and bulk-updated for one account at a time.

Direct grants are stored for the matrix UI; the request-time permission
set comes from roles only (see permission_service.load_principal).
"""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.permissions import PermissionValue, Principal
from app.models.bin import Bin, UserBin
from app.models.permission import PermissionDefinition, UserPermission
from app.models.team import Team, UserTeam
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.permission import (
    MatrixResponse,
    MatrixUpdateRecord,
    MatrixUpdateRequest,
    MatrixUser,
    PermissionDefinitionResponse,
)
from app.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

settings = get_settings()


def list_definitions(db: Session) -> list[PermissionDefinition]:
    return (
        db.query(PermissionDefinition)
        .filter(PermissionDefinition.is_active.is_(True))
        .order_by(PermissionDefinition.display_order, PermissionDefinition.id)
        .all()
    )


def get_matrix(db: Session, principal: Principal) -> MatrixResponse:
    users = (
        db.query(User)
        .filter(User.account_id == principal.account_id)
        .order_by(User.id)
        .all()
    )
    if not users:
        return MatrixResponse(users=[], permission_definitions=[])

    user_ids = [u.id for u in users]

    grants: dict[int, dict] = {uid: {} for uid in user_ids}
    for row in db.query(UserPermission).filter(UserPermission.user_id.in_(user_ids)).all():
        value = PermissionValue.from_json(row.permission_value)
        grants[row.user_id][row.permission_key] = value.to_json()

    bins: dict[int, list[int]] = {uid: [] for uid in user_ids}
    for user_id, bin_id in (
        db.query(UserBin.user_id, UserBin.bin_id)
        .filter(UserBin.user_id.in_(user_ids))
        .order_by(UserBin.bin_id)
        .all()
    ):
        bins[user_id].append(bin_id)

    teams: dict[int, list[int]] = {uid: [] for uid in user_ids}
    for user_id, team_id in (
        db.query(UserTeam.user_id, UserTeam.team_id)
        .filter(UserTeam.user_id.in_(user_ids))
        .order_by(UserTeam.team_id)
        .all()
    ):
        teams[user_id].append(team_id)

    return MatrixResponse(
        users=[
            MatrixUser(
                id=u.id,
                email=u.email,
                firstname=u.first_name,
                lastname=u.last_name,
                permissions=grants[u.id],
                bins_assigned=bins[u.id],
                teams_assigned=teams[u.id],
            )
            for u in users
        ],
        permission_definitions=[
            PermissionDefinitionResponse.model_validate(d) for d in list_definitions(db)
        ],
    )


def _upsert_grant(db: Session, user_id: int, key: str, value: PermissionValue, granted_by: int) -> None:
    grant = (
        db.query(UserPermission)
        .filter(UserPermission.user_id == user_id, UserPermission.permission_key == key)
        .first()
    )
    if grant:
        grant.permission_value = value.to_json()
        grant.granted_by = granted_by
        grant.updated_at = utc_now()
    else:
        db.add(
            UserPermission(
                user_id=user_id,
                permission_key=key,
                permission_value=value.to_json(),
                granted_by=granted_by,
            )
        )


def _owned_ids(db: Session, model, ids: Iterable[int], account_id: int) -> list[int]:
    """Requested ids that belong to the account, de-duplicated, in request order."""
    wanted = list(dict.fromkeys(ids))
    if not wanted:
        return []
    owned = {
        row.id
        for row in db.query(model.id).filter(model.id.in_(wanted), model.account_id == account_id).all()
    }
    return [i for i in wanted if i in owned]


def _replace_bins(db: Session, user_id: int, bin_ids: list[int], principal: Principal) -> None:
    db.query(UserBin).filter(UserBin.user_id == user_id).delete(synchronize_session=False)
    for bin_id in _owned_ids(db, Bin, bin_ids, principal.account_id):
        db.add(UserBin(user_id=user_id, bin_id=bin_id, assigned_by=principal.id))


def _replace_teams(db: Session, user_id: int, team_ids: list[int], principal: Principal) -> None:
    db.query(UserTeam).filter(UserTeam.user_id == user_id).delete(synchronize_session=False)
    for team_id in _owned_ids(db, Team, team_ids, principal.account_id):
        db.add(UserTeam(user_id=user_id, team_id=team_id, assigned_by=principal.id))


def _apply_record(db: Session, principal: Principal, record: MatrixUpdateRecord) -> bool:
    """
    Stage one record's writes. Returns False when the target user is not in
    the caller's account, in which case nothing is written.
    """
    target = (
        db.query(User.id)
        .filter(User.id == record.user_id, User.account_id == principal.account_id)
        .first()
    )
    if not target:
        return False

    for key, value in record.permissions.items():
        _upsert_grant(db, record.user_id, key, value, principal.id)
    db.flush()

    if record.bins_assigned is not None:
        _replace_bins(db, record.user_id, record.bins_assigned, principal)
    if record.teams_assigned is not None:
        _replace_teams(db, record.user_id, record.teams_assigned, principal)
    db.flush()
    return True


def apply_matrix_updates(db: Session, principal: Principal, request: MatrixUpdateRequest) -> SuccessResponse:
    """
    Apply a bulk matrix update.

    Records for users outside the caller's account are skipped without
    being reported. By default each record is committed on its own, so a
    failure part-way leaves earlier records applied; with
    settings.matrix_atomic_batch the batch commits once.
    """
    applied = 0
    skipped = 0
    for record in request.updates:
        if _apply_record(db, principal, record):
            applied += 1
            if not settings.matrix_atomic_batch:
                db.commit()
        else:
            skipped += 1
            logger.debug("Matrix update skipped user %s (not in account %s)", record.user_id, principal.account_id)

    if settings.matrix_atomic_batch:
        db.commit()

    logger.info(
        "Matrix bulk-updated by user %s: %d applied, %d skipped",
        principal.id,
        applied,
        skipped,
    )
    return SuccessResponse(success=True, message="Permissions updated successfully")
