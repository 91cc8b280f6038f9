"""Settlement invoice schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SettlementCreate(BaseModel):
    decision: Literal["paid", "bad_debt"]
    note: Optional[str] = None
    price_per_session: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[Literal["cash", "transfer"]] = None
    collected_by_name: Optional[str] = None
    course_name: Optional[str] = None


class SettlementInvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_code: str
    student_id: int
    student_name: str
    class_name: Optional[str] = None
    course_name: Optional[str] = None
    total_sessions: int
    attended_sessions: int
    debt_sessions: int
    price_per_session: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    status: str
    payment_method: Optional[str] = None
    collected_by_name: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime
