from datetime import date, datetime, time, timedelta
from typing import List, Optional

from ..constraints import Constraints, TimeRange
from ..models import Course

MAX_SEARCH_DAYS = 90
DEFAULT_WINDOW = TimeRange(time(9, 0), time(17, 0))


def round_up(minutes: int, multiple: int) -> int:
    if multiple <= 1:
        return minutes
    return ((minutes + multiple - 1) // multiple) * multiple


def estimate_duration(course: Course, constraints: Constraints) -> int:
    """Exam length in minutes: base + credit * coefficient, rounded up, floored."""
    raw = constraints.base_exam_duration_minutes
    credit = course.credit
    if credit is not None and credit > 0:
        raw += credit * constraints.credit_duration_coefficient_minutes
    return max(constraints.min_exam_duration_minutes, round_up(raw, constraints.duration_rounding_minutes))


def search_days(constraints: Constraints, today: Optional[date] = None) -> List[date]:
    """Calendar days scanned for placement, allowed or not, in ascending order."""
    start = constraints.exam_week_start_date
    if start is None:
        start = (today or date.today()) + timedelta(days=1)
    end = constraints.exam_week_end_date
    if end is not None and end < start:
        raise ValueError(f"exam_week_end_date {end} cannot be before exam week start {start}")

    max_days = MAX_SEARCH_DAYS
    if end is not None:
        max_days = min((end - start).days + 1, MAX_SEARCH_DAYS)
    return [start + timedelta(days=i) for i in range(max_days)]


def candidate_starts(day: date, constraints: Constraints) -> List[datetime]:
    # duration is not considered here, fits_time_ranges filters per course
    ranges = constraints.allowed_time_ranges or [DEFAULT_WINDOW]
    step = timedelta(minutes=constraints.slot_step_minutes)
    out: List[datetime] = []
    for tr in ranges:
        t = datetime.combine(day, tr.start)
        last = datetime.combine(day, tr.end)
        while t <= last:
            out.append(t)
            t += step
    return out


def fits_time_ranges(start: datetime, duration_minutes: int, constraints: Constraints) -> bool:
    ranges = constraints.allowed_time_ranges
    if not ranges:
        return True
    end = start + timedelta(minutes=duration_minutes)
    day = start.date()
    for tr in ranges:
        if datetime.combine(day, tr.start) <= start and end <= datetime.combine(day, tr.end):
            return True
    return False
