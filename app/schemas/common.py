# app/schemas/common.py
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel

from app.utils.datetime_utils import as_utc

# SQLite returns naive datetimes; everything leaves the API as UTC-aware.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None
