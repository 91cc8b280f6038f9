"""Debt settlement: close out a student's session debt with one invoice."""

import re
import secrets
from datetime import datetime
from decimal import Decimal
from typing import Callable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.errors import InvoiceCodeConflictError, NotFoundError, ValidationError
from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now
from backend.app.models.audit_log import AuditLog
from backend.app.models.settlement_invoice import SettlementInvoice, SettlementStatus
from backend.app.models.student import Student, StudentStatus
from backend.app.services import ledger
from backend.app.services.bad_debt import check_settlement_status, prepare_clear_bad_debt_update, reconcile_student

logger = get_logger("services.settlement")

MAX_ATTEMPTS = 2
DEFAULT_COURSE_NAME = "Khóa học tiếng Anh"

_TAG = re.compile(r"<[^>]*>")


def generate_invoice_code(student_id: int, now: datetime) -> str:
    return f"STL-{now:%Y%m%d}-{student_id}-{secrets.token_hex(2).upper()}"


def sanitize_note(note: str | None) -> str | None:
    if note is None:
        return None
    cleaned = _TAG.sub("", note).strip()
    return cleaned or None


def calculate_debt_amount(debt_sessions: int, price_per_session: Decimal) -> Decimal:
    return Decimal(debt_sessions) * Decimal(str(price_per_session))


def prepare_student_update(
    decision: SettlementStatus,
    debt_sessions: int,
    total_amount: Decimal,
    now: datetime,
    note: str | None = None,
    keep_bad_debt: bool = False,
) -> dict:
    """Enrollment changes written together with the settlement invoice.

    With ``keep_bad_debt`` a paid settlement leaves the bad-debt fields alone,
    since an earlier bad-debt invoice outranks it.
    """
    update = {
        "status": StudentStatus.WITHDRAWN.value,
        "class_id": None,
    }
    if decision is SettlementStatus.PAID:
        if not keep_bad_debt:
            update.update(prepare_clear_bad_debt_update())
    else:
        update.update(
            {
                "bad_debt": True,
                "bad_debt_sessions": debt_sessions,
                "bad_debt_amount": total_amount,
                "bad_debt_date": now,
                "bad_debt_note": note or f"Nợ {debt_sessions} buổi - Tất toán",
            }
        )
    return update


def _parse_decision(decision) -> SettlementStatus:
    try:
        return SettlementStatus(decision)
    except ValueError:
        raise ValidationError(f"Unknown settlement decision: {decision}") from None


def _settle_once(
    db: Session,
    student_id: int,
    decision: SettlementStatus,
    *,
    price_per_session: Decimal,
    note: str | None,
    payment_method: str | None,
    collected_by_name: str | None,
    course_name: str | None,
    now: datetime,
    code_factory: Callable[[int, datetime], str],
) -> SettlementInvoice:
    invoice_code = code_factory(student_id, now)
    try:
        student = db.query(Student).filter(Student.id == student_id).with_for_update().first()
        if student is None:
            raise NotFoundError("Student", student_id)

        debt = ledger.debt_sessions(student)
        if debt <= 0:
            raise ValidationError(f"Student {student_id} has no session debt to settle")

        total_amount = calculate_debt_amount(debt, price_per_session)
        class_group = student.class_group
        is_paid = decision is SettlementStatus.PAID

        invoice = SettlementInvoice(
            invoice_code=invoice_code,
            student_id=student.id,
            student_name=student.full_name,
            class_name=class_group.name if class_group else None,
            course_name=course_name or (class_group.course_name if class_group else None) or DEFAULT_COURSE_NAME,
            total_sessions=student.registered_sessions or 0,
            attended_sessions=student.attended_sessions or 0,
            debt_sessions=debt,
            price_per_session=price_per_session,
            total_amount=total_amount,
            paid_amount=total_amount if is_paid else Decimal("0"),
            remaining_amount=Decimal("0") if is_paid else total_amount,
            status=decision.value,
            payment_method=payment_method if is_paid else None,
            collected_by_name=collected_by_name,
            note=note,
            created_at=now,
        )
        db.add(invoice)

        keep_bad_debt = is_paid and check_settlement_status(db, student.id).has_bad_debt_invoice
        update = prepare_student_update(decision, debt, total_amount, now, note, keep_bad_debt=keep_bad_debt)
        for key, value in update.items():
            setattr(student, key, value)

        db.add(AuditLog(student_id=student.id, action="settlement_created", detail=invoice_code))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvoiceCodeConflictError(invoice_code) from None
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    return invoice


def settle(
    db: Session,
    student_id: int,
    decision,
    *,
    price_per_session: Decimal | None = None,
    note: str | None = None,
    payment_method: str | None = None,
    collected_by_name: str | None = None,
    course_name: str | None = None,
    now: datetime | None = None,
    code_factory: Callable[[int, datetime], str] = generate_invoice_code,
) -> SettlementInvoice:
    """Settle a student's session debt as paid or written off.

    The invoice and the enrollment update commit together or not at all. An
    invoice-code collision is retried once with a fresh code.
    """
    decision = _parse_decision(decision)
    price = Decimal(str(price_per_session)) if price_per_session is not None else get_settings().price_per_session
    if price < 0:
        raise ValidationError("Price per session cannot be negative")
    now = now or utc_now()
    note = sanitize_note(note)

    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            invoice = _settle_once(
                db,
                student_id,
                decision,
                price_per_session=price,
                note=note,
                payment_method=payment_method,
                collected_by_name=collected_by_name,
                course_name=course_name,
                now=now,
                code_factory=code_factory,
            )
        except InvoiceCodeConflictError as exc:
            if attempt == MAX_ATTEMPTS:
                raise
            logger.warning(
                "settlement_code_conflict_retry",
                extra={"student_id": student_id, "invoice_code": exc.invoice_code, "attempt": attempt},
            )
            continue
        break

    logger.info(
        "settlement_created",
        extra={
            "student_id": student_id,
            "invoice_code": invoice.invoice_code,
            "status": invoice.status,
            "debt_sessions": invoice.debt_sessions,
            "total_amount": invoice.total_amount,
        },
    )
    reconcile_student(db, student_id, now=now)
    return invoice


def list_settlement_invoices(
    db: Session,
    *,
    student_id: int | None = None,
    status: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> List[SettlementInvoice]:
    query = db.query(SettlementInvoice)
    if student_id is not None:
        query = query.filter(SettlementInvoice.student_id == student_id)
    if status is not None:
        query = query.filter(SettlementInvoice.status == status)
    return (
        query.order_by(SettlementInvoice.created_at.desc(), SettlementInvoice.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
