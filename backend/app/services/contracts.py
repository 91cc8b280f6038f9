"""Contract creation: price line items and credit paid sessions to the student."""

import math
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.core.logging import get_logger
from backend.app.core.time import utc_now
from backend.app.models.contract import Contract, ContractItem
from backend.app.models.discount import Discount
from backend.app.models.student import Student, StudentStatus
from backend.app.services.bad_debt import EnrollmentSnapshot, on_student_updated
from backend.app.services.discounts import DiscountType, price_with_catalog

logger = get_logger("services.contracts")

CONTRACT_CATEGORIES = ("new", "renewal", "linked")
CONTRACT_STATUSES = ("paid", "partial", "unpaid")
ITEM_TYPES = ("course", "product")


@dataclass
class ContractItemInput:
    name: str
    unit_price: Decimal
    quantity: int = 1
    item_type: str = "course"
    class_id: int | None = None
    discount_ids: list = field(default_factory=list)
    custom_discount_value: Decimal | None = None
    custom_discount_type: str = DiscountType.PERCENT.value


def generate_contract_code(now: datetime) -> str:
    return f"HD-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def credited_sessions(status: str, total_sessions: int, total_amount: Decimal, paid_amount: Decimal) -> int:
    """Sessions the student may attend for what has been paid so far."""
    if status == "paid":
        return total_sessions
    if status == "unpaid" or total_sessions == 0:
        return 0
    if total_amount <= 0:
        return total_sessions
    return math.floor(Decimal(total_sessions) * paid_amount / total_amount)


def _load_catalog(db: Session, items: list[ContractItemInput]) -> dict:
    ids = {int(discount_id) for item in items for discount_id in item.discount_ids if str(discount_id).isdigit()}
    if not ids:
        return {}
    return {str(d.id): d for d in db.query(Discount).filter(Discount.id.in_(ids)).all()}


def _validate(items: list[ContractItemInput], category: str, status: str) -> None:
    if not items:
        raise ValidationError("A contract needs at least one item")
    if category not in CONTRACT_CATEGORIES:
        raise ValidationError(f"Unknown contract category: {category}")
    if status not in CONTRACT_STATUSES:
        raise ValidationError(f"Unknown contract status: {status}")
    for item in items:
        if item.item_type not in ITEM_TYPES:
            raise ValidationError(f"Unknown item type: {item.item_type}")
        if item.quantity <= 0:
            raise ValidationError(f"Quantity for {item.name} must be positive")
        if Decimal(str(item.unit_price)) < 0:
            raise ValidationError(f"Unit price for {item.name} cannot be negative")


def create_contract(
    db: Session,
    *,
    student_id: int,
    items: list[ContractItemInput],
    category: str = "new",
    status: str = "paid",
    paid_amount: Decimal | None = None,
    now: datetime | None = None,
) -> Contract:
    _validate(items, category, status)
    now = now or utc_now()

    student = db.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student", student_id)

    catalog = _load_catalog(db, items)
    contract_items: list[ContractItem] = []
    for item in items:
        unit_price = Decimal(str(item.unit_price))
        subtotal = unit_price * item.quantity
        custom = None
        if item.custom_discount_value is not None:
            custom = (item.custom_discount_value, DiscountType(item.custom_discount_type))
        pricing = price_with_catalog(subtotal, item.discount_ids, catalog, custom)
        contract_items.append(
            ContractItem(
                item_type=item.item_type,
                name=item.name,
                class_id=item.class_id,
                unit_price=unit_price,
                quantity=item.quantity,
                subtotal=pricing.subtotal,
                applied_discounts=[ad.to_dict() for ad in pricing.applied_discounts],
                discount_ratio=pricing.discount_ratio,
                final_price=pricing.final_price,
            )
        )

    subtotal = sum((ci.subtotal for ci in contract_items), Decimal("0"))
    total_amount = sum((ci.final_price for ci in contract_items), Decimal("0"))
    total_discount = subtotal - total_amount

    if status == "paid":
        paid = total_amount
    elif status == "unpaid":
        paid = Decimal("0")
    else:
        if paid_amount is None:
            raise ValidationError("A partially paid contract needs a paid amount")
        paid = Decimal(str(paid_amount))
        if paid <= 0 or paid >= total_amount:
            raise ValidationError("Partial payment must be between zero and the contract total")

    total_sessions = sum(ci.quantity for ci in contract_items if ci.item_type == "course")
    credited = credited_sessions(status, total_sessions, total_amount, paid)

    contract = Contract(
        code=generate_contract_code(now),
        student_id=student.id,
        category=category,
        status=status,
        subtotal=subtotal,
        total_discount=total_discount,
        total_amount=total_amount,
        paid_amount=paid,
        remaining_amount=total_amount - paid,
        total_sessions=total_sessions,
        credited_sessions=credited,
        created_at=now,
        items=contract_items,
    )
    db.add(contract)

    before = EnrollmentSnapshot.from_student(student)
    if credited:
        student.registered_sessions = (student.registered_sessions or 0) + credited
    if status == "partial":
        student.status = StudentStatus.DEBT.value
    elif category == "new" and student.status == StudentStatus.TRIAL.value and status == "paid":
        student.status = StudentStatus.STUDYING.value
    if student.class_id is None:
        student.class_id = next((ci.class_id for ci in contract_items if ci.item_type == "course" and ci.class_id), None)
    if student.start_date is None and credited:
        student.start_date = now.date()

    db.commit()
    db.refresh(contract)

    logger.info(
        "contract_created",
        extra={
            "student_id": student.id,
            "contract_code": contract.code,
            "status": status,
            "total_amount": total_amount,
            "credited_sessions": credited,
        },
    )
    on_student_updated(db, before, student.id, now=now)
    return contract
