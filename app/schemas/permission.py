from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from app.core.permissions import BINS_ASSIGNED, PermissionValue, PermissionValueType


class PermissionDefinitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    permission_key: str
    display_name: str
    description: str | None = None
    value_type: PermissionValueType
    display_order: int


class MatrixUpdateRecord(BaseModel):
    """
    One user's changes. binsAssigned / teamsAssigned, when present (even
    empty), replace the user's whole assignment set.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    user_id: PositiveInt = Field(alias="userId")
    permissions: dict[str, PermissionValue] = Field(default_factory=dict)
    bins_assigned: list[int] | None = Field(default=None, alias="binsAssigned")
    teams_assigned: list[int] | None = Field(default=None, alias="teamsAssigned")

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_permission_values(cls, v: Any) -> dict[str, PermissionValue]:
        if not isinstance(v, dict):
            raise ValueError("permissions must be an object keyed by permission key")
        # bins_assigned is carried by binsAssigned, whatever value it has here
        return {key: PermissionValue.from_json(raw) for key, raw in v.items() if key != BINS_ASSIGNED}


class MatrixUpdateRequest(BaseModel):
    updates: list[MatrixUpdateRecord]


class MatrixUser(BaseModel):
    id: int
    email: str
    firstname: str
    lastname: str
    permissions: dict[str, Any] = {}
    bins_assigned: list[int] = []
    teams_assigned: list[int] = []


class MatrixResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    users: list[MatrixUser] = []
    permission_definitions: list[PermissionDefinitionResponse] = Field(
        default_factory=list, alias="permissionDefinitions"
    )
