"""Student schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

StudentStatusLiteral = Literal["studying", "trial", "reserved", "withdrawn", "debt"]


class StudentBase(BaseModel):
    full_name: str
    code: Optional[str] = None
    parent_name: Optional[str] = None
    phone: Optional[str] = None
    status: StudentStatusLiteral = "studying"
    class_id: Optional[int] = None
    start_date: Optional[date] = None


class StudentCreate(StudentBase):
    registered_sessions: int = Field(default=0, ge=0)
    attended_sessions: int = Field(default=0, ge=0)


class EnrollmentUpdate(BaseModel):
    status: Optional[StudentStatusLiteral] = None
    class_id: Optional[int] = None
    registered_sessions: Optional[int] = Field(default=None, ge=0)
    attended_sessions: Optional[int] = Field(default=None, ge=0)

    @field_validator("status", "registered_sessions", "attended_sessions")
    @classmethod
    def reject_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class StudentRead(StudentBase):
    id: int
    registered_sessions: int
    attended_sessions: int
    bad_debt: bool
    bad_debt_sessions: Optional[int] = None
    bad_debt_amount: Optional[Decimal] = None
    bad_debt_date: Optional[datetime] = None
    bad_debt_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerRead(BaseModel):
    student_id: int
    status: str
    registered_sessions: int
    attended_sessions: int
    remaining_sessions: int
    debt_sessions: int
    is_expiring_soon: bool
    is_in_debt: bool
    schedule_days: list[int]
    expected_end_date: date
    upcoming_sessions: list[date]


class ReconcileRead(BaseModel):
    student_id: int
    action: str
    student: StudentRead
