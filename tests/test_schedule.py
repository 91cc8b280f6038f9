from datetime import date

import pytest

from backend.app.services.schedule import (
    class_schedule_for,
    generate_session_dates,
    parse_schedule_days,
    parse_schedule_string,
    project_end_date,
    weekday_index,
)

SUNDAY = date(2024, 6, 2)
MON_WED = frozenset({1, 3})


class _Class:
    def __init__(self, schedule=None, schedule_details=None):
        self.schedule = schedule
        self.schedule_details = schedule_details


def test_weekday_index_is_sunday_based():
    assert weekday_index(SUNDAY) == 0
    assert weekday_index(date(2024, 6, 3)) == 1
    assert weekday_index(date(2024, 6, 8)) == 6


def test_project_end_date_counts_class_days_after_start():
    assert project_end_date(3, MON_WED, SUNDAY) == date(2024, 6, 10)


def test_project_end_date_excludes_from_date_itself():
    monday = date(2024, 6, 3)
    assert project_end_date(1, MON_WED, monday) == date(2024, 6, 5)


def test_project_end_date_with_nothing_left_returns_from_date():
    assert project_end_date(0, MON_WED, SUNDAY) == SUNDAY
    assert project_end_date(-2, MON_WED, SUNDAY) == SUNDAY


def test_project_end_date_empty_schedule_uses_default():
    assert project_end_date(3, frozenset(), SUNDAY) == date(2024, 6, 10)


def test_project_end_date_stops_at_horizon():
    result = project_end_date(500, frozenset({0}), SUNDAY)
    assert (result - SUNDAY).days == 365


@pytest.mark.parametrize(
    "text,expected",
    [
        ("T2, T4", {1, 3}),
        ("Thứ 2, 4, 6", {1, 3, 5}),
        ("18:00-19:30 T3, T5", {2, 4}),
        ("thứ hai - thứ tư", {1, 3}),
        ("T7, CN", {6, 0}),
        ("Chủ nhật", {0}),
        ("", set()),
        (None, set()),
    ],
)
def test_parse_schedule_string(text, expected):
    assert parse_schedule_string(text) == frozenset(expected)


def test_schedule_details_win_over_string():
    details = [{"day_of_week": "3"}, {"day_of_week": "CN"}]
    assert parse_schedule_days(details, "T2, T4") == frozenset({2, 0})


def test_unparseable_schedule_falls_back_to_default():
    assert parse_schedule_days(None, "every day") == MON_WED
    assert parse_schedule_days([{"day_of_week": "9"}], None) == MON_WED
    assert parse_schedule_days(None, None) == MON_WED


def test_class_schedule_for_missing_class_uses_default():
    assert class_schedule_for(None) == MON_WED
    assert class_schedule_for(_Class(schedule="T3, T5")) == frozenset({2, 4})


def test_generate_session_dates_includes_start_date():
    monday = date(2024, 6, 3)
    assert generate_session_dates(monday, 3, MON_WED) == [date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 10)]


def test_generate_session_dates_empty_inputs():
    assert generate_session_dates(SUNDAY, 0, MON_WED) == []
    assert generate_session_dates(SUNDAY, 3, frozenset()) == []
