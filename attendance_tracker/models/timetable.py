from datetime import datetime
from typing import Literal

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field

DayName = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class TimetableEntry(Document):
    """Weekly recurring class slot; the template for daily attendance records."""
    user: Indexed(str)
    class_name: str
    day: Indexed(str)  # English weekday name, e.g. "Monday"
    time: str  # slot, e.g. "09:00-10:00"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "timetable"
        use_state_management = True


class TimetableEntryCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    class_name: str = Field(..., min_length=1)
    day: DayName
    time: str = Field(..., min_length=1)


class TimetableEntryOut(BaseModel):
    id: str
    user: str
    class_name: str
    day: str
    time: str
