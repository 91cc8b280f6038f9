"""Class schedule parsing and end-date projection.

Weekday indices follow the center's convention: 0 = Sunday ... 6 = Saturday.
Vietnamese day codes number the week from Monday as "Thứ 2" (T2) up to
"Thứ 7" (T7), with Sunday written as "Chủ nhật" (CN).
"""

import re
import unicodedata
from datetime import date, timedelta
from typing import Iterable

from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings

logger = get_logger("services.schedule")

DAY_NAMES = ["Chủ nhật", "Thứ 2", "Thứ 3", "Thứ 4", "Thứ 5", "Thứ 6", "Thứ 7"]

_WORD_DAYS = {
    "chủ nhật": 0,
    "thứ hai": 1,
    "thứ ba": 2,
    "thứ tư": 3,
    "thứ năm": 4,
    "thứ sáu": 5,
    "thứ bảy": 6,
}

_TIME_RANGE = re.compile(r"\d{1,2}\s*[h:]\s*(\d{2})?\s*[-–]\s*\d{1,2}\s*[h:]\s*(\d{2})?", re.IGNORECASE)
_SUNDAY_CODE = re.compile(r"\bcn\b", re.IGNORECASE)
_DAY_NUMBER = re.compile(r"(?<!\d)([2-7])(?!\d)")


def weekday_index(value: date) -> int:
    """Convert Python's Monday-based weekday to the Sunday-based index."""
    return (value.weekday() + 1) % 7


def _day_code_to_index(code) -> int | None:
    text = str(code).strip()
    if text.upper() == "CN":
        return 0
    if text.isdigit():
        number = int(text)
        if 2 <= number <= 7:
            return number - 1
    return None


def parse_schedule_string(schedule: str | None) -> frozenset[int]:
    """Extract weekdays from a compact day-code string.

    Handles "T2, T4", "Thứ 2, 4, 6", "thứ hai - thứ tư" and "CN"; any
    "14:00-15:30" style time range is ignored.
    """
    if not schedule:
        return frozenset()

    text = _TIME_RANGE.sub(" ", unicodedata.normalize("NFC", schedule).lower())
    days: set[int] = set()

    for word, index in _WORD_DAYS.items():
        if word in text:
            days.add(index)
            text = text.replace(word, " ")

    if _SUNDAY_CODE.search(text):
        days.add(0)

    for match in _DAY_NUMBER.finditer(text):
        days.add(int(match.group(1)) - 1)

    return frozenset(days)


def parse_schedule_days(schedule_details: Iterable | None, schedule: str | None) -> frozenset[int]:
    """Resolve the set of class weekdays, falling back to the default pattern.

    An explicit per-day list wins over the compact string. The result is never
    empty.
    """
    days: set[int] = set()
    if schedule_details:
        for detail in schedule_details:
            code = detail.get("day_of_week") if isinstance(detail, dict) else detail
            index = _day_code_to_index(code)
            if index is not None:
                days.add(index)
    elif schedule:
        days.update(parse_schedule_string(schedule))

    if not days:
        fallback = get_settings().default_schedule_days
        logger.debug("schedule_default_applied", extra={"schedule": schedule, "days": sorted(fallback)})
        return frozenset(fallback)
    return frozenset(days)


def class_schedule_for(class_group) -> frozenset[int]:
    """Weekdays for a ClassGroup row, or the default pattern when there is none."""
    if class_group is None:
        return parse_schedule_days(None, None)
    return parse_schedule_days(class_group.schedule_details, class_group.schedule)


def project_end_date(remaining_sessions: int, schedule: Iterable[int] | None, from_date: date) -> date:
    """Date of the last remaining session, counting class days after ``from_date``."""
    if remaining_sessions <= 0:
        return from_date

    days = frozenset(schedule or ()) or frozenset(get_settings().default_schedule_days)
    horizon = get_settings().projection_horizon_days

    current = from_date
    counted = 0
    for _ in range(horizon):
        current += timedelta(days=1)
        if weekday_index(current) in days:
            counted += 1
            if counted >= remaining_sessions:
                return current

    logger.warning(
        "projection_horizon_reached",
        extra={"remaining_sessions": remaining_sessions, "counted": counted, "last_date": current},
    )
    return current


def generate_session_dates(start_date: date, total_sessions: int, schedule: Iterable[int] | None) -> list[date]:
    """List upcoming class dates from ``start_date`` inclusive."""
    days = frozenset(schedule or ())
    if not days or total_sessions <= 0:
        return []

    horizon = get_settings().projection_horizon_days
    sessions: list[date] = []
    current = start_date
    checked = 0
    while len(sessions) < total_sessions and checked < horizon:
        if weekday_index(current) in days:
            sessions.append(current)
        current += timedelta(days=1)
        checked += 1
    return sessions
