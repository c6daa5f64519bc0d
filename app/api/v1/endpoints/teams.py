from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.permissions import Principal
from app.dependencies.authz import require_route
from app.schemas.common import SuccessResponse
from app.schemas.team import TeamCreate, TeamResponse, TeamUpdate
from app.services import team_service

router = APIRouter()


@router.get("", response_model=list[TeamResponse], tags=["teams"])
def list_teams(
    principal: Principal = Depends(require_route("teams.list")),
    db: Session = Depends(get_db),
) -> list[TeamResponse]:
    return team_service.list_teams(db, principal.account_id)


@router.post(
    "",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["teams"],
)
def create_team(
    payload: TeamCreate,
    principal: Principal = Depends(require_route("teams.create")),
    db: Session = Depends(get_db),
) -> TeamResponse:
    return team_service.create_team(db, principal, payload)


@router.put("/{team_id}", response_model=TeamResponse, tags=["teams"])
def update_team(
    team_id: int,
    payload: TeamUpdate,
    principal: Principal = Depends(require_route("teams.update")),
    db: Session = Depends(get_db),
) -> TeamResponse:
    return team_service.update_team(db, principal, team_id, payload)


@router.delete("/{team_id}", response_model=SuccessResponse, tags=["teams"])
def delete_team(
    team_id: int,
    principal: Principal = Depends(require_route("teams.delete")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    team_service.delete_team(db, principal, team_id)
    return SuccessResponse(success=True, message="Team deleted")
