from pydantic import BaseModel, ConfigDict, EmailStr, Field, PositiveInt

from app.schemas.role import RoleAssignmentView


class UserCreate(BaseModel):
    """
    roleIds and binIds are parallel lists: binIds[i] scopes roleIds[i]
    (missing or null = global). Non-null binIds also become direct bin
    assignments.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(min_length=8)
    firstname: str = Field(min_length=1, max_length=100)
    lastname: str = Field(min_length=1, max_length=100)
    role_ids: list[PositiveInt] = Field(default_factory=list, alias="roleIds")
    bin_ids: list[PositiveInt | None] = Field(default_factory=list, alias="binIds")
    team_ids: list[PositiveInt] = Field(default_factory=list, alias="teamIds")


class UserUpdate(BaseModel):
    firstname: str | None = Field(default=None, min_length=1, max_length=100)
    lastname: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(min_length=8, alias="newPassword")


class UserSummary(BaseModel):
    id: int
    email: str
    firstname: str
    lastname: str


class ManagedUserResponse(UserSummary):
    roles: list[RoleAssignmentView] = []
