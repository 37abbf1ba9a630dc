import datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field


class Holiday(Document):
    """A day on which no attendance is tracked, for any user or class."""
    date: Indexed(datetime.datetime)  # local midnight of the holiday
    reason: str
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)

    class Settings:
        name = "holidays"
        use_state_management = True


class HolidayOut(BaseModel):
    id: str
    date: datetime.datetime
    reason: str
    created_at: Optional[datetime.datetime] = None


class HolidayCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    date: datetime.date
    reason: str = Field(..., min_length=1)
