"""Dashboard lists built from the session ledger."""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from backend.app.core.settings import get_settings
from backend.app.models.student import Student, StudentStatus
from backend.app.services import ledger
from backend.app.services.schedule import class_schedule_for, project_end_date

CENTS = Decimal("0.01")


def _class_name(student: Student) -> str | None:
    return student.class_group.name if student.class_group else None


def get_expiring_soon(db: Session, *, today: date, threshold: int | None = None) -> dict:
    students = (
        db.query(Student)
        .options(joinedload(Student.class_group))
        .filter(Student.status == StudentStatus.STUDYING.value)
        .all()
    )
    rows = []
    for stu in students:
        if not ledger.is_expiring_soon(stu, threshold):
            continue
        left = ledger.remaining(stu)
        rows.append(
            {
                "student_id": stu.id,
                "full_name": stu.full_name,
                "class_name": _class_name(stu),
                "remaining_sessions": left,
                "start_date": stu.start_date,
                "expected_end_date": project_end_date(left, class_schedule_for(stu.class_group), today),
            }
        )
    rows.sort(key=lambda row: (row["remaining_sessions"], row["full_name"]))
    return {"as_of": today.isoformat(), "students": rows}


def get_debt_students(db: Session, *, today: date) -> dict:
    price = get_settings().price_per_session
    students = (
        db.query(Student)
        .options(joinedload(Student.class_group))
        .filter(Student.status != StudentStatus.WITHDRAWN.value)
        .all()
    )
    rows = []
    total = Decimal("0")
    for stu in students:
        if not ledger.is_in_debt(stu):
            continue
        debt = ledger.debt_sessions(stu)
        amount = Decimal(debt) * price
        total += amount
        rows.append(
            {
                "student_id": stu.id,
                "full_name": stu.full_name,
                "class_name": _class_name(stu),
                "status": stu.status,
                "registered_sessions": stu.registered_sessions or 0,
                "attended_sessions": stu.attended_sessions or 0,
                "debt_sessions": debt,
                "debt_amount": str(amount.quantize(CENTS)),
            }
        )
    # Largest debt first
    rows.sort(key=lambda row: (-row["debt_sessions"], row["full_name"]))
    return {"as_of": today.isoformat(), "total_debt_amount": str(total.quantize(CENTS)), "students": rows}


def get_bad_debt_students(db: Session, *, today: date) -> dict:
    students = db.query(Student).filter(Student.bad_debt.is_(True)).order_by(Student.bad_debt_date.desc()).all()
    total = sum((Decimal(str(stu.bad_debt_amount or 0)) for stu in students), Decimal("0"))
    rows = [
        {
            "student_id": stu.id,
            "full_name": stu.full_name,
            "bad_debt_sessions": stu.bad_debt_sessions or 0,
            "bad_debt_amount": str(Decimal(str(stu.bad_debt_amount or 0)).quantize(CENTS)),
            "bad_debt_date": stu.bad_debt_date,
            "bad_debt_note": stu.bad_debt_note,
        }
        for stu in students
    ]
    return {"as_of": today.isoformat(), "total_bad_debt_amount": str(total.quantize(CENTS)), "students": rows}
