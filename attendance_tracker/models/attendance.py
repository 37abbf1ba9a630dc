from datetime import datetime
from enum import Enum
from typing import Literal, Optional

import pymongo
from beanie import Document
from pydantic import BaseModel, Field
from pymongo import IndexModel


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    PRESENT = "present"
    ABSENT = "absent"


class AttendanceRecord(Document):
    """One user's attendance for one class on one calendar day."""
    user: str
    class_name: str
    date: str  # YYYY-MM-DD
    status: AttendanceStatus = AttendanceStatus.PENDING
    marked_at: Optional[datetime] = None  # when the record left "pending"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance"
        use_state_management = True
        indexes = [
            IndexModel(
                [("user", pymongo.ASCENDING), ("class_name", pymongo.ASCENDING), ("date", pymongo.ASCENDING)],
                unique=True,
                name="user_class_date_unique",
            ),
            IndexModel([("date", pymongo.ASCENDING), ("status", pymongo.ASCENDING)], name="date_status"),
        ]


class AttendanceCreate(BaseModel):
    class_name: str = Field(..., min_length=1)


class AttendanceMarkRequest(BaseModel):
    status: Literal["present", "absent"]


class AttendanceOut(BaseModel):
    id: str
    user: str
    class_name: str
    date: str
    status: AttendanceStatus
    marked_at: Optional[datetime] = None


class ClassSummary(BaseModel):
    class_name: str
    present: int
    absent: int
    pending: int
    total: int
    percentage: int
