"""
Scheduling constraints.

Every option is validated when it is set; invalid values raise ValueError
immediately instead of being clamped.
"""

from datetime import date, time
from typing import Dict, Iterable, List, Optional

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)
WEEKDAY_NAMES = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]


class TimeRange:
    """Half-open daily window [start, end)."""

    def __init__(self, start: time, end: time):
        if start is None or end is None:
            raise ValueError("TimeRange needs both start and end")
        if not start < end:
            raise ValueError(f"TimeRange start must be before end ({start} >= {end})")
        self._start = start
        self._end = end

    @property
    def start(self) -> time:
        return self._start

    @property
    def end(self) -> time:
        return self._end

    def contains(self, t: time) -> bool:
        return t is not None and self._start <= t < self._end

    @classmethod
    def parse(cls, text: str) -> "TimeRange":
        """Parse 'HH:MM-HH:MM'."""
        parts = text.strip().split("-")
        if len(parts) != 2:
            raise ValueError(f"Invalid time range: {text!r}")
        return cls(time.fromisoformat(parts[0].strip()), time.fromisoformat(parts[1].strip()))

    def __eq__(self, other):
        if not isinstance(other, TimeRange):
            return NotImplemented
        return (self._start, self._end) == (other._start, other._end)

    def __hash__(self):
        return hash((self._start, self._end))

    def __repr__(self):
        return f"TimeRange({self._start:%H:%M}-{self._end:%H:%M})"


def _at_least(name: str, value: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


class Constraints:
    def __init__(
        self,
        min_minutes_between_exams: int = 60,
        max_exams_per_day: int = 2,
        allowed_days: Optional[Iterable[int]] = None,
        allowed_time_ranges: Optional[Iterable[TimeRange]] = None,
        exam_week_start_date: Optional[date] = None,
        exam_week_end_date: Optional[date] = None,
        room_turnover_minutes: int = 10,
        slot_step_minutes: int = 5,
        base_exam_duration_minutes: int = 90,
        credit_duration_coefficient_minutes: int = 15,
        duration_rounding_minutes: int = 5,
        min_exam_duration_minutes: int = 120,
        room_specific_rules: Optional[Dict[str, str]] = None,
    ):
        self._exam_week_start_date: Optional[date] = None
        self._exam_week_end_date: Optional[date] = None

        self.min_minutes_between_exams = min_minutes_between_exams
        self.max_exams_per_day = max_exams_per_day
        self.allowed_days = range(MONDAY, SATURDAY) if allowed_days is None else allowed_days
        self.allowed_time_ranges = (
            [TimeRange(time(9, 0), time(17, 0))] if allowed_time_ranges is None else allowed_time_ranges
        )
        self.exam_week_start_date = exam_week_start_date
        self.exam_week_end_date = exam_week_end_date
        self.room_turnover_minutes = room_turnover_minutes
        self.slot_step_minutes = slot_step_minutes
        self.base_exam_duration_minutes = base_exam_duration_minutes
        self.credit_duration_coefficient_minutes = credit_duration_coefficient_minutes
        self.duration_rounding_minutes = duration_rounding_minutes
        self.min_exam_duration_minutes = min_exam_duration_minutes
        self.room_specific_rules = room_specific_rules or {}

    # -- spacing ---------------------------------------------------------

    @property
    def min_minutes_between_exams(self) -> int:
        return self._min_minutes_between_exams

    @min_minutes_between_exams.setter
    def min_minutes_between_exams(self, value: int) -> None:
        self._min_minutes_between_exams = _at_least("min_minutes_between_exams", value, 0)

    @property
    def max_exams_per_day(self) -> int:
        return self._max_exams_per_day

    @max_exams_per_day.setter
    def max_exams_per_day(self, value: int) -> None:
        self._max_exams_per_day = _at_least("max_exams_per_day", value, 1)

    # -- days and windows ------------------------------------------------

    @property
    def allowed_days(self) -> List[int]:
        return list(self._allowed_days)

    @allowed_days.setter
    def allowed_days(self, days: Iterable[int]) -> None:
        out: List[int] = []
        for d in days or []:
            if isinstance(d, bool) or not isinstance(d, int) or not MONDAY <= d <= SUNDAY:
                raise ValueError(f"allowed_days entries must be weekday numbers 0-6, got {d!r}")
            if d not in out:
                out.append(d)
        self._allowed_days = out

    @property
    def allowed_time_ranges(self) -> List[TimeRange]:
        return list(self._allowed_time_ranges)

    @allowed_time_ranges.setter
    def allowed_time_ranges(self, ranges: Iterable[TimeRange]) -> None:
        out: List[TimeRange] = []
        for r in ranges or []:
            if not isinstance(r, TimeRange):
                raise ValueError(f"allowed_time_ranges entries must be TimeRange, got {r!r}")
            out.append(r)
        self._allowed_time_ranges = out

    def add_allowed_time_range(self, time_range: TimeRange) -> None:
        if not isinstance(time_range, TimeRange):
            raise ValueError(f"expected TimeRange, got {time_range!r}")
        self._allowed_time_ranges.append(time_range)

    def is_day_allowed(self, day: date) -> bool:
        if day is None:
            return False
        return not self._allowed_days or day.weekday() in self._allowed_days

    def is_time_allowed(self, t: time) -> bool:
        if t is None:
            return False
        if not self._allowed_time_ranges:
            return True
        return any(r.contains(t) for r in self._allowed_time_ranges)

    # -- exam week -------------------------------------------------------

    @property
    def exam_week_start_date(self) -> Optional[date]:
        return self._exam_week_start_date

    @exam_week_start_date.setter
    def exam_week_start_date(self, value: Optional[date]) -> None:
        self._check_exam_week(value, self._exam_week_end_date)
        self._exam_week_start_date = value

    @property
    def exam_week_end_date(self) -> Optional[date]:
        return self._exam_week_end_date

    @exam_week_end_date.setter
    def exam_week_end_date(self, value: Optional[date]) -> None:
        self._check_exam_week(self._exam_week_start_date, value)
        self._exam_week_end_date = value

    @staticmethod
    def _check_exam_week(start: Optional[date], end: Optional[date]) -> None:
        if start is not None and end is not None and start > end:
            raise ValueError(f"exam_week_start_date {start} cannot be after exam_week_end_date {end}")

    def is_within_exam_week(self, day: date) -> bool:
        if day is None:
            return False
        if self._exam_week_start_date is not None and day < self._exam_week_start_date:
            return False
        if self._exam_week_end_date is not None and day > self._exam_week_end_date:
            return False
        return True

    # -- rooms and slots -------------------------------------------------

    @property
    def room_turnover_minutes(self) -> int:
        return self._room_turnover_minutes

    @room_turnover_minutes.setter
    def room_turnover_minutes(self, value: int) -> None:
        self._room_turnover_minutes = _at_least("room_turnover_minutes", value, 0)

    @property
    def slot_step_minutes(self) -> int:
        return self._slot_step_minutes

    @slot_step_minutes.setter
    def slot_step_minutes(self, value: int) -> None:
        self._slot_step_minutes = _at_least("slot_step_minutes", value, 1)

    @property
    def room_specific_rules(self) -> Dict[str, str]:
        return dict(self._room_specific_rules)

    @room_specific_rules.setter
    def room_specific_rules(self, rules: Dict[str, str]) -> None:
        self._room_specific_rules = dict(rules or {})

    def put_room_rule(self, room_id: str, rule: str) -> None:
        if not room_id or not room_id.strip():
            raise ValueError("room_id cannot be blank")
        self._room_specific_rules[room_id] = rule

    def room_rule(self, room_id: str) -> Optional[str]:
        return self._room_specific_rules.get(room_id)

    # -- duration --------------------------------------------------------

    @property
    def base_exam_duration_minutes(self) -> int:
        return self._base_exam_duration_minutes

    @base_exam_duration_minutes.setter
    def base_exam_duration_minutes(self, value: int) -> None:
        self._base_exam_duration_minutes = _at_least("base_exam_duration_minutes", value, 1)

    @property
    def credit_duration_coefficient_minutes(self) -> int:
        return self._credit_duration_coefficient_minutes

    @credit_duration_coefficient_minutes.setter
    def credit_duration_coefficient_minutes(self, value: int) -> None:
        self._credit_duration_coefficient_minutes = _at_least("credit_duration_coefficient_minutes", value, 0)

    @property
    def duration_rounding_minutes(self) -> int:
        return self._duration_rounding_minutes

    @duration_rounding_minutes.setter
    def duration_rounding_minutes(self, value: int) -> None:
        self._duration_rounding_minutes = _at_least("duration_rounding_minutes", value, 1)

    @property
    def min_exam_duration_minutes(self) -> int:
        return self._min_exam_duration_minutes

    @min_exam_duration_minutes.setter
    def min_exam_duration_minutes(self, value: int) -> None:
        self._min_exam_duration_minutes = _at_least("min_exam_duration_minutes", value, 1)

    # --------------------------------------------------------------------

    def _as_tuple(self):
        return (
            self._min_minutes_between_exams,
            self._max_exams_per_day,
            tuple(self._allowed_days),
            tuple(self._allowed_time_ranges),
            self._exam_week_start_date,
            self._exam_week_end_date,
            self._room_turnover_minutes,
            self._slot_step_minutes,
            self._base_exam_duration_minutes,
            self._credit_duration_coefficient_minutes,
            self._duration_rounding_minutes,
            self._min_exam_duration_minutes,
            tuple(sorted(self._room_specific_rules.items())),
        )

    def copy(self) -> "Constraints":
        return Constraints(
            min_minutes_between_exams=self._min_minutes_between_exams,
            max_exams_per_day=self._max_exams_per_day,
            allowed_days=self._allowed_days,
            allowed_time_ranges=self._allowed_time_ranges,
            exam_week_start_date=self._exam_week_start_date,
            exam_week_end_date=self._exam_week_end_date,
            room_turnover_minutes=self._room_turnover_minutes,
            slot_step_minutes=self._slot_step_minutes,
            base_exam_duration_minutes=self._base_exam_duration_minutes,
            credit_duration_coefficient_minutes=self._credit_duration_coefficient_minutes,
            duration_rounding_minutes=self._duration_rounding_minutes,
            min_exam_duration_minutes=self._min_exam_duration_minutes,
            room_specific_rules=self._room_specific_rules,
        )

    def __eq__(self, other):
        if not isinstance(other, Constraints):
            return NotImplemented
        return self._as_tuple() == other._as_tuple()

    def __repr__(self):
        days = ",".join(WEEKDAY_NAMES[d][:3] for d in self._allowed_days)
        return (
            f"Constraints(min_gap={self._min_minutes_between_exams}, max_per_day={self._max_exams_per_day}, "
            f"days=[{days}], ranges={self._allowed_time_ranges}, "
            f"week={self._exam_week_start_date}..{self._exam_week_end_date}, "
            f"turnover={self._room_turnover_minutes}, step={self._slot_step_minutes}, "
            f"duration={self._base_exam_duration_minutes}+{self._credit_duration_coefficient_minutes}/credit "
            f"round {self._duration_rounding_minutes} min {self._min_exam_duration_minutes})"
        )
