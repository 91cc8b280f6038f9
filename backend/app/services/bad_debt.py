"""Bad-debt reconciliation for student records.

The decision is recomputed from the student's settlement-invoice history and
session counters on every call, never from deltas, so redundant or
out-of-order invocations converge on the same state.

Priority is strict: any bad-debt settlement invoice keeps the flag set, even
if a paid invoice was recorded later. Only then does a paid invoice clear the
flag, and only with no invoices at all do the raw counters decide.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now
from backend.app.models.audit_log import AuditLog
from backend.app.models.settlement_invoice import SettlementInvoice, SettlementStatus
from backend.app.models.student import Student, StudentStatus

logger = get_logger("services.bad_debt")


class BadDebtAction(str, enum.Enum):
    KEEP = "keep-bad-debt"
    CLEAR = "clear-bad-debt"
    AUTO_SET = "auto-set-bad-debt"
    NO_ACTION = "no-action"


@dataclass(frozen=True)
class SettlementCheckResult:
    has_bad_debt_invoice: bool = False
    has_paid_invoice: bool = False
    paid_invoice_code: str | None = None


@dataclass(frozen=True)
class EnrollmentSnapshot:
    status: str
    registered_sessions: int
    attended_sessions: int
    bad_debt: bool = False

    @classmethod
    def from_student(cls, student: Student) -> "EnrollmentSnapshot":
        return cls(
            status=student.status,
            registered_sessions=student.registered_sessions or 0,
            attended_sessions=student.attended_sessions or 0,
            bad_debt=bool(student.bad_debt),
        )


def check_settlement_status(db: Session, student_id: int) -> SettlementCheckResult:
    has_bad_debt = (
        db.query(SettlementInvoice.id)
        .filter(
            SettlementInvoice.student_id == student_id,
            SettlementInvoice.status == SettlementStatus.BAD_DEBT.value,
        )
        .first()
        is not None
    )
    if has_bad_debt:
        return SettlementCheckResult(has_bad_debt_invoice=True)

    paid = (
        db.query(SettlementInvoice)
        .filter(
            SettlementInvoice.student_id == student_id,
            SettlementInvoice.status == SettlementStatus.PAID.value,
        )
        .order_by(SettlementInvoice.created_at.desc(), SettlementInvoice.id.desc())
        .first()
    )
    if paid is not None:
        return SettlementCheckResult(has_paid_invoice=True, paid_invoice_code=paid.invoice_code or "N/A")

    return SettlementCheckResult()


def decide(attended_sessions: int, registered_sessions: int, check: SettlementCheckResult) -> BadDebtAction:
    if check.has_bad_debt_invoice:
        return BadDebtAction.KEEP
    if check.has_paid_invoice:
        return BadDebtAction.CLEAR
    if (attended_sessions or 0) > (registered_sessions or 0):
        return BadDebtAction.AUTO_SET
    return BadDebtAction.NO_ACTION


def prepare_bad_debt_update(debt_sessions: int, now: datetime, price_per_session: Decimal | None = None) -> dict:
    price = price_per_session if price_per_session is not None else get_settings().price_per_session
    return {
        "bad_debt": True,
        "bad_debt_sessions": debt_sessions,
        "bad_debt_amount": Decimal(debt_sessions) * Decimal(str(price)),
        "bad_debt_date": now,
        "bad_debt_note": f"Nghỉ học khi còn nợ {debt_sessions} buổi",
    }


def prepare_clear_bad_debt_update() -> dict:
    return {
        "bad_debt": False,
        "bad_debt_sessions": None,
        "bad_debt_amount": None,
        "bad_debt_date": None,
        "bad_debt_note": None,
    }


def _has_bad_debt_fields(student: Student) -> bool:
    return bool(student.bad_debt) or any(
        value is not None
        for value in (
            student.bad_debt_sessions,
            student.bad_debt_amount,
            student.bad_debt_date,
            student.bad_debt_note,
        )
    )


def _apply(student: Student, update: dict) -> None:
    for key, value in update.items():
        setattr(student, key, value)


def _latest_bad_debt_invoice(db: Session, student_id: int) -> SettlementInvoice | None:
    return (
        db.query(SettlementInvoice)
        .filter(
            SettlementInvoice.student_id == student_id,
            SettlementInvoice.status == SettlementStatus.BAD_DEBT.value,
        )
        .order_by(SettlementInvoice.created_at.desc(), SettlementInvoice.id.desc())
        .first()
    )


def _keep(db: Session, student: Student) -> bool:
    if student.bad_debt:
        return False
    invoice = _latest_bad_debt_invoice(db, student.id)
    _apply(
        student,
        {
            "bad_debt": True,
            "bad_debt_sessions": invoice.debt_sessions,
            "bad_debt_amount": invoice.remaining_amount,
            "bad_debt_date": invoice.created_at,
            "bad_debt_note": invoice.note or f"Nợ {invoice.debt_sessions} buổi - Tất toán",
        },
    )
    db.add(AuditLog(student_id=student.id, action="bad_debt_restored", detail=invoice.invoice_code))
    return True


def _clear(db: Session, student: Student, check: SettlementCheckResult) -> bool:
    if not _has_bad_debt_fields(student):
        return False
    _apply(student, prepare_clear_bad_debt_update())
    db.add(AuditLog(student_id=student.id, action="bad_debt_cleared", detail=check.paid_invoice_code))
    return True


def _auto_set(db: Session, student: Student, now: datetime) -> bool:
    if student.bad_debt:
        return False
    if student.status != StudentStatus.WITHDRAWN.value:
        # Arrears of an active student stay a session debt until settled.
        return False
    debt = max(0, (student.attended_sessions or 0) - (student.registered_sessions or 0))
    update = prepare_bad_debt_update(debt, now)
    _apply(student, update)
    db.add(AuditLog(student_id=student.id, action="bad_debt_auto_set", detail=update["bad_debt_note"]))
    return True


def reconcile_student(db: Session, student_id: int, *, now: datetime | None = None) -> BadDebtAction:
    """Decide and apply the bad-debt action for one student.

    Applying the same decision twice leaves the record unchanged the second
    time. A missing student routes to ``no-action``.
    """
    student = db.get(Student, student_id)
    if student is None:
        logger.info("reconcile_student_missing", extra={"student_id": student_id})
        return BadDebtAction.NO_ACTION

    check = check_settlement_status(db, student_id)
    action = decide(student.attended_sessions, student.registered_sessions, check)

    if action is BadDebtAction.KEEP:
        changed = _keep(db, student)
    elif action is BadDebtAction.CLEAR:
        changed = _clear(db, student, check)
    elif action is BadDebtAction.AUTO_SET:
        changed = _auto_set(db, student, now or utc_now())
    else:
        changed = False

    if changed:
        db.commit()
        db.refresh(student)

    logger.info(
        "bad_debt_reconciled",
        extra={"student_id": student_id, "action": action.value, "changed": changed},
    )
    return action


def on_student_updated(
    db: Session,
    before: EnrollmentSnapshot,
    student_id: int,
    *,
    now: datetime | None = None,
) -> BadDebtAction | None:
    """Record-change hook; reconciles when status or session counters moved."""
    student = db.get(Student, student_id)
    if student is None:
        return None
    after = EnrollmentSnapshot.from_student(student)
    if (
        before.status == after.status
        and before.registered_sessions == after.registered_sessions
        and before.attended_sessions == after.attended_sessions
    ):
        return None
    return reconcile_student(db, student_id, now=now)
