from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from app.schemas.common import UtcDatetime


class KBItemCreate(BaseModel):
    title: str = Field(min_length=5, max_length=255)
    content: str = Field(min_length=10)
    category: str = Field(default="General", min_length=1, max_length=100)
    source_ticket_id: PositiveInt | None = None


class KBItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    category: str
    author_id: int | None = None
    source_ticket_id: int | None = None
    created_at: UtcDatetime
