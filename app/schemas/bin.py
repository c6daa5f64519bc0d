from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from app.schemas.common import UtcDatetime

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class BinCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    manager_id: PositiveInt | None = Field(default=None, alias="managerId")
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)


class BinUpdate(BaseModel):
    """
    Only fields present in the request body are applied; managerId may be
    sent as null to clear the manager.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    manager_id: PositiveInt | None = Field(default=None, alias="managerId")
    is_active: bool | None = Field(default=None, alias="isActive")
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)


class BinResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    manager_id: int | None = None
    is_active: bool
    color: str
    created_at: UtcDatetime


class BinSummary(BinResponse):
    manager_name: str | None = None
    manager_email: str | None = None
    active_tickets: int = 0
    open_tickets: int = 0
    in_progress_tickets: int = 0


class BinDetail(BinSummary):
    total_tickets: int = 0
    closed_tickets: int = 0


class TransferTicketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to_bin_id: PositiveInt = Field(alias="toBinId")
    reason: str | None = None
