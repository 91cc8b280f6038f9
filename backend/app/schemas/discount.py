"""Discount catalog and line-item pricing schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DiscountTypeLiteral = Literal["percent", "fixed"]


def _check_percent(discount):
    if discount.type == "percent" and discount.value > 100:
        raise ValueError("A percent discount cannot exceed 100")
    return discount


class DiscountCreate(BaseModel):
    name: str
    type: DiscountTypeLiteral
    value: Decimal = Field(gt=0)
    status: Literal["active", "paused"] = "active"

    @model_validator(mode="after")
    def check_percent(self):
        return _check_percent(self)


class DiscountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    value: Decimal
    status: str
    created_at: datetime


class CustomDiscountIn(BaseModel):
    value: Decimal = Field(gt=0)
    type: DiscountTypeLiteral = "percent"

    @model_validator(mode="after")
    def check_percent(self):
        return _check_percent(self)


class PricingPreviewRequest(BaseModel):
    subtotal: Decimal = Field(ge=0)
    discount_ids: list[str] = []
    custom_discount: Optional[CustomDiscountIn] = None


class AppliedDiscountRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    discount_id: str
    name: str
    type: str
    value: Decimal
    amount: Decimal


class LineItemPricingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subtotal: Decimal
    applied_discounts: list[AppliedDiscountRead]
    total_discount: Decimal
    discount_ratio: Decimal
    final_price: Decimal
