from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str | None = None
    permissions: list[str] = []
    account_id: int | None = None


class RoleAssignmentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role_id: PositiveInt = Field(alias="roleId")
    bin_id: PositiveInt | None = Field(default=None, alias="binId")


class AssignRolesRequest(BaseModel):
    """Full replacement of a user's role assignments."""

    model_config = ConfigDict(populate_by_name=True)

    role_ids: list[RoleAssignmentIn] = Field(alias="roleIds")


class RoleAssignmentView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role_id: int = Field(alias="roleId")
    role_name: str = Field(alias="roleName")
    role_display_name: str = Field(alias="roleDisplayName")
    bin_id: int | None = Field(default=None, alias="binId")
    bin_name: str | None = Field(default=None, alias="binName")
