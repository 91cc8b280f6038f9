"""Parallel discount pricing for contract line items.

Every discount amount is computed from the item's original subtotal, so the
order in which discounts are attached never changes the price. Mutations are
set operations that return a new pricing recomputed from the full discount set.
"""

import enum
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

from backend.app.core.logging import get_logger

logger = get_logger("services.discounts")

CUSTOM_PREFIX = "custom-"
MONEY_UNIT = Decimal("1")
RATIO_QUANT = Decimal("0.0001")
ZERO = Decimal("0")


class DiscountType(str, enum.Enum):
    PERCENT = "percent"
    FIXED = "fixed"


@dataclass(frozen=True)
class DiscountSpec:
    discount_id: str
    name: str
    type: DiscountType
    value: Decimal


@dataclass(frozen=True)
class AppliedDiscount:
    discount_id: str
    name: str
    type: DiscountType
    value: Decimal
    amount: Decimal

    @property
    def is_custom(self) -> bool:
        return self.discount_id.startswith(CUSTOM_PREFIX)

    def to_dict(self) -> dict:
        return {
            "discount_id": self.discount_id,
            "name": self.name,
            "type": self.type.value,
            "value": str(self.value),
            "amount": str(self.amount),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "AppliedDiscount":
        return cls(
            discount_id=str(data["discount_id"]),
            name=data["name"],
            type=DiscountType(data["type"]),
            value=Decimal(str(data["value"])),
            amount=Decimal(str(data["amount"])),
        )


@dataclass(frozen=True)
class LineItemPricing:
    subtotal: Decimal
    applied_discounts: tuple[AppliedDiscount, ...] = field(default_factory=tuple)
    total_discount: Decimal = ZERO
    discount_ratio: Decimal = ZERO
    final_price: Decimal = ZERO


def _money(value) -> Decimal:
    return Decimal(str(value))


def compute_discount_amount(subtotal: Decimal, discount_type: DiscountType, value: Decimal) -> Decimal:
    """Currency amount of one discount against the original subtotal."""
    subtotal = _money(subtotal)
    value = _money(value)
    if DiscountType(discount_type) is DiscountType.PERCENT:
        amount = subtotal * value / Decimal("100")
    else:
        amount = value
    return min(amount, subtotal).quantize(MONEY_UNIT, rounding=ROUND_HALF_UP)


def _recompute(subtotal: Decimal, applied: Iterable[AppliedDiscount]) -> LineItemPricing:
    applied = tuple(applied)
    total = sum((ad.amount for ad in applied), ZERO)
    final_price = max(subtotal - total, ZERO)
    if subtotal > 0:
        ratio = min(total / subtotal, Decimal("1")).quantize(RATIO_QUANT, rounding=ROUND_HALF_UP)
    else:
        ratio = ZERO
    return LineItemPricing(
        subtotal=subtotal,
        applied_discounts=applied,
        total_discount=total,
        discount_ratio=ratio,
        final_price=final_price,
    )


def _bind(subtotal: Decimal, spec: DiscountSpec) -> AppliedDiscount:
    return AppliedDiscount(
        discount_id=spec.discount_id,
        name=spec.name,
        type=DiscountType(spec.type),
        value=_money(spec.value),
        amount=compute_discount_amount(subtotal, spec.type, spec.value),
    )


def apply_discounts(subtotal, discounts: Iterable[DiscountSpec] = ()) -> LineItemPricing:
    """Price a line item with a set of discounts.

    Discounts are keyed by id; repeating an id keeps the first occurrence and
    only the last custom discount in the input is kept.
    """
    subtotal = _money(subtotal)
    applied: list[AppliedDiscount] = []
    seen: set[str] = set()
    for spec in discounts:
        if spec.discount_id in seen:
            continue
        if spec.discount_id.startswith(CUSTOM_PREFIX):
            applied = [ad for ad in applied if not ad.is_custom]
        seen.add(spec.discount_id)
        applied.append(_bind(subtotal, spec))
    return _recompute(subtotal, applied)


def toggle_discount(pricing: LineItemPricing, discount: DiscountSpec, checked: bool) -> LineItemPricing:
    remaining = [ad for ad in pricing.applied_discounts if ad.discount_id != discount.discount_id]
    if checked:
        remaining.append(_bind(pricing.subtotal, discount))
    return _recompute(pricing.subtotal, remaining)


def custom_discount_name(value: Decimal, discount_type: DiscountType) -> str:
    value = _money(value)
    if DiscountType(discount_type) is DiscountType.PERCENT:
        return f"Tùy chỉnh {value.normalize():f}%"
    return f"Giảm {int(value):,}đ".replace(",", ".")


def add_custom_discount(
    pricing: LineItemPricing,
    value,
    discount_type: DiscountType,
    *,
    discount_id: str | None = None,
) -> LineItemPricing:
    """Attach a one-off discount, replacing any previous custom one."""
    value = _money(value)
    if value <= 0:
        return pricing
    spec = DiscountSpec(
        discount_id=discount_id or f"{CUSTOM_PREFIX}{uuid.uuid4().hex[:12]}",
        name=custom_discount_name(value, discount_type),
        type=DiscountType(discount_type),
        value=value,
    )
    remaining = [ad for ad in pricing.applied_discounts if not ad.is_custom]
    remaining.append(_bind(pricing.subtotal, spec))
    return _recompute(pricing.subtotal, remaining)


def remove_discount(pricing: LineItemPricing, discount_id: str) -> LineItemPricing:
    remaining = [ad for ad in pricing.applied_discounts if ad.discount_id != discount_id]
    return _recompute(pricing.subtotal, remaining)


def reprice(pricing: LineItemPricing, subtotal) -> LineItemPricing:
    """Recompute every attached discount against a new subtotal."""
    subtotal = _money(subtotal)
    specs = [DiscountSpec(ad.discount_id, ad.name, ad.type, ad.value) for ad in pricing.applied_discounts]
    return apply_discounts(subtotal, specs)


def spec_from_catalog(discount) -> DiscountSpec:
    return DiscountSpec(
        discount_id=str(discount.id),
        name=discount.name,
        type=DiscountType(discount.type),
        value=_money(discount.value),
    )


def price_with_catalog(
    subtotal,
    discount_ids: Iterable,
    catalog: Mapping,
    custom: tuple | None = None,
) -> LineItemPricing:
    """Price an item from catalog discount ids plus an optional custom discount.

    ``catalog`` maps discount id to a Discount row. Unknown or paused ids are
    skipped so a stale selection never blocks pricing. ``custom`` is a
    ``(value, type)`` pair.
    """
    specs: list[DiscountSpec] = []
    for discount_id in discount_ids:
        discount = catalog.get(str(discount_id))
        if discount is None or discount.status != "active":
            logger.warning("discount_skipped", extra={"discount_id": str(discount_id)})
            continue
        specs.append(spec_from_catalog(discount))

    pricing = apply_discounts(subtotal, specs)
    if custom is not None:
        value, discount_type = custom
        pricing = add_custom_discount(pricing, value, discount_type)
    return pricing