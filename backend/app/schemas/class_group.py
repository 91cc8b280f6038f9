"""Class schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ScheduleDetail(BaseModel):
    day_of_week: str


class ClassGroupCreate(BaseModel):
    name: str
    course_name: Optional[str] = None
    schedule: Optional[str] = None
    schedule_details: Optional[list[ScheduleDetail]] = None


class ClassGroupRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    course_name: Optional[str] = None
    schedule: Optional[str] = None
    schedule_details: Optional[list[ScheduleDetail]] = None
    schedule_days: list[int] = []
    created_at: datetime
