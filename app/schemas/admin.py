from pydantic import BaseModel, ConfigDict

from app.models.user import UserRoleLabel
from app.schemas.common import UtcDatetime


class AdminUserResponse(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str
    role: str


class UpdateUserRoleRequest(BaseModel):
    role: UserRoleLabel


class ActivityLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None = None
    action: str
    details: str | None = None
    timestamp: UtcDatetime


class UserStatsResponse(BaseModel):
    total_users: int = 0
    admin_count: int = 0
    manager_count: int = 0
    support_count: int = 0
    user_count: int = 0
