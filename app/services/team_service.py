# app/services/team_service.py
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import commit_or_conflict
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.permissions import Principal
from app.models.team import Team
from app.models.ticket import Ticket
from app.schemas.team import TeamCreate, TeamResponse, TeamUpdate

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "Team name already exists for this account"


def list_teams(db: Session, account_id: int) -> list[TeamResponse]:
    ticket_count = (
        db.query(func.count(Ticket.id))
        .filter(Ticket.team_id == Team.id)
        .correlate(Team)
        .scalar_subquery()
    )
    rows = (
        db.query(Team, ticket_count)
        .filter(Team.account_id == account_id)
        .order_by(Team.name)
        .all()
    )
    result = []
    for team, n in rows:
        item = TeamResponse.model_validate(team)
        item.ticket_count = n or 0
        result.append(item)
    return result


def _load_team(db: Session, account_id: int, team_id: int) -> Team:
    team = (
        db.query(Team)
        .filter(Team.id == team_id, Team.account_id == account_id)
        .first()
    )
    if not team:
        raise NotFoundError("Team not found")
    return team


def create_team(db: Session, principal: Principal, payload: TeamCreate) -> Team:
    existing = (
        db.query(Team.id)
        .filter(Team.account_id == principal.account_id, Team.name == payload.name)
        .first()
    )
    if existing:
        raise ConflictError(DUPLICATE_NAME)

    team = Team(
        account_id=principal.account_id,
        name=payload.name,
        description=payload.description,
        is_active=True,
        created_by=principal.id,
    )
    db.add(team)
    commit_or_conflict(db, DUPLICATE_NAME)
    db.refresh(team)
    logger.info("User %s created team %s (%s)", principal.id, team.id, team.name)
    return team


def update_team(db: Session, principal: Principal, team_id: int, payload: TeamUpdate) -> Team:
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No updates provided")

    team = _load_team(db, principal.account_id, team_id)
    for field, value in updates.items():
        if value is None and field != "description":
            continue
        setattr(team, field, value)

    commit_or_conflict(db, DUPLICATE_NAME)
    db.refresh(team)
    logger.info("User %s updated team %s", principal.id, team.id)
    return team


def delete_team(db: Session, principal: Principal, team_id: int) -> None:
    """Soft delete: the team stays referenced by its tickets."""
    team = _load_team(db, principal.account_id, team_id)
    team.is_active = False
    db.commit()
    logger.info("User %s deleted team %s", principal.id, team.id)
