"""Derived registered/attended session view for a student."""

from datetime import date, timedelta

from backend.app.core.settings import get_settings
from backend.app.models.student import StudentStatus
from backend.app.services.schedule import class_schedule_for, generate_session_dates, project_end_date


def remaining(enrollment) -> int:
    return max(0, (enrollment.registered_sessions or 0) - (enrollment.attended_sessions or 0))


def debt_sessions(enrollment) -> int:
    return max(0, (enrollment.attended_sessions or 0) - (enrollment.registered_sessions or 0))


def is_expiring_soon(enrollment, threshold: int | None = None) -> bool:
    if threshold is None:
        threshold = get_settings().expiring_threshold
    left = remaining(enrollment)
    return enrollment.status == StudentStatus.STUDYING.value and 0 < left <= threshold


def is_in_debt(enrollment) -> bool:
    return enrollment.status == StudentStatus.DEBT.value or debt_sessions(enrollment) > 0


def ledger_summary(student, *, today: date, upcoming_limit: int = 10) -> dict:
    """Ledger figures plus the projected end date on the student's class schedule."""
    schedule = class_schedule_for(student.class_group)
    left = remaining(student)
    return {
        "student_id": student.id,
        "status": student.status,
        "registered_sessions": student.registered_sessions or 0,
        "attended_sessions": student.attended_sessions or 0,
        "remaining_sessions": left,
        "debt_sessions": debt_sessions(student),
        "is_expiring_soon": is_expiring_soon(student),
        "is_in_debt": is_in_debt(student),
        "schedule_days": sorted(schedule),
        "expected_end_date": project_end_date(left, schedule, today),
        "upcoming_sessions": generate_session_dates(today + timedelta(days=1), min(left, upcoming_limit), schedule),
    }
