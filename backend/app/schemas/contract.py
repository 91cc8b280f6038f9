"""Contract schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.app.schemas.discount import AppliedDiscountRead, CustomDiscountIn


class ContractItemCreate(BaseModel):
    name: str
    item_type: Literal["course", "product"] = "course"
    class_id: Optional[int] = None
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, gt=0)
    discount_ids: list[str] = []
    custom_discount: Optional[CustomDiscountIn] = None


class ContractCreate(BaseModel):
    student_id: int
    category: Literal["new", "renewal", "linked"] = "new"
    status: Literal["paid", "partial", "unpaid"] = "paid"
    paid_amount: Optional[Decimal] = None
    items: list[ContractItemCreate]


class ContractItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_type: str
    name: str
    class_id: Optional[int] = None
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    applied_discounts: list[AppliedDiscountRead]
    discount_ratio: Decimal
    final_price: Decimal


class ContractRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    student_id: int
    category: str
    status: str
    subtotal: Decimal
    total_discount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    total_sessions: int
    credited_sessions: int
    created_at: datetime
    items: list[ContractItemRead]
