from datetime import date, time

import pytest

from examsched.constraints import FRIDAY, MONDAY, SATURDAY, Constraints, TimeRange


def test_defaults():
    c = Constraints()
    assert c.min_minutes_between_exams == 60
    assert c.max_exams_per_day == 2
    assert c.allowed_days == [0, 1, 2, 3, 4]
    assert c.allowed_time_ranges == [TimeRange(time(9, 0), time(17, 0))]
    assert c.room_turnover_minutes == 10
    assert c.min_exam_duration_minutes == 120
    assert c.exam_week_start_date is None


@pytest.mark.parametrize("attr,value", [
    ("min_minutes_between_exams", -1),
    ("max_exams_per_day", 0),
    ("room_turnover_minutes", -5),
    ("slot_step_minutes", 0),
    ("base_exam_duration_minutes", 0),
    ("credit_duration_coefficient_minutes", -1),
    ("duration_rounding_minutes", 0),
    ("min_exam_duration_minutes", 0),
])
def test_setters_reject_invalid_values(attr, value):
    c = Constraints()
    before = getattr(c, attr)
    with pytest.raises(ValueError):
        setattr(c, attr, value)
    assert getattr(c, attr) == before


def test_exam_week_start_after_end_rejected():
    c = Constraints(exam_week_start_date=date(2026, 1, 5), exam_week_end_date=date(2026, 1, 9))
    with pytest.raises(ValueError):
        c.exam_week_start_date = date(2026, 1, 10)
    with pytest.raises(ValueError):
        c.exam_week_end_date = date(2026, 1, 4)
    with pytest.raises(ValueError):
        Constraints(exam_week_start_date=date(2026, 1, 9), exam_week_end_date=date(2026, 1, 5))


def test_time_range_validation_and_contains():
    with pytest.raises(ValueError):
        TimeRange(time(12, 0), time(12, 0))
    r = TimeRange.parse("09:00-12:00")
    assert r.contains(time(9, 0))
    assert not r.contains(time(12, 0))


def test_allowed_days_and_times():
    c = Constraints(allowed_days=[MONDAY, FRIDAY])
    assert c.is_day_allowed(date(2026, 1, 5))
    assert not c.is_day_allowed(date(2026, 1, 6))
    c.allowed_days = []
    assert c.is_day_allowed(date(2026, 1, 10))
    with pytest.raises(ValueError):
        c.allowed_days = [7]

    c.allowed_time_ranges = [TimeRange(time(9, 0), time(12, 0))]
    c.add_allowed_time_range(TimeRange(time(13, 0), time(17, 0)))
    assert c.is_time_allowed(time(13, 30))
    assert not c.is_time_allowed(time(12, 30))


def test_within_exam_week():
    c = Constraints(exam_week_start_date=date(2026, 1, 5), exam_week_end_date=date(2026, 1, 9))
    assert c.is_within_exam_week(date(2026, 1, 9))
    assert not c.is_within_exam_week(date(2026, 1, 10))


def test_room_rules_and_copy():
    c = Constraints(allowed_days=[SATURDAY])
    c.put_room_rule("A101", "no calculators")
    assert c.room_rule("A101") == "no calculators"
    assert c.room_rule("B1") is None

    d = c.copy()
    assert d == c
    d.max_exams_per_day = 3
    assert d != c
