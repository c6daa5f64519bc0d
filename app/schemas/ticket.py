from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from app.models.ticket import TicketPriority, TicketStatus
from app.schemas.common import UtcDatetime


class TicketCreate(BaseModel):
    subject: str = Field(min_length=5, max_length=255)
    content: str = Field(min_length=10)
    priority: TicketPriority = TicketPriority.MEDIUM
    bin_id: PositiveInt | None = None
    team_id: PositiveInt | None = None


class TicketUpdate(BaseModel):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assignee_id: PositiveInt | None = None


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject: str
    content: str
    status: TicketStatus
    priority: TicketPriority
    requester_id: int | None = None
    assignee_id: int | None = None
    bin_id: int | None = None
    team_id: int | None = None
    duplicate_of_id: int | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    archived_at: UtcDatetime | None = None
