from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import UtcDatetime

ACCOUNT_NAME_PATTERN = r"^[a-z0-9_]+$"


class AccountCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        min_length=1,
        max_length=255,
        pattern=ACCOUNT_NAME_PATTERN,
        description="Lowercase letters, digits and underscores only",
    )
    display_name: str = Field(min_length=1, max_length=255, alias="displayName")
    settings: dict[str, Any] | None = None


class AccountUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str | None = Field(default=None, min_length=1, max_length=255, alias="displayName")
    is_active: bool | None = Field(default=None, alias="isActive")
    settings: dict[str, Any] | None = None


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    is_active: bool
    settings: dict[str, Any] = {}
    created_at: UtcDatetime
    updated_at: UtcDatetime | None = None

    # Computed fields
    user_count: int | None = None
    ticket_count: int | None = None
    bin_count: int | None = None
