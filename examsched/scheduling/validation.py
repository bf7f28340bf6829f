from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List

from ..constraints import Constraints
from ..models import Calendar, ExamSession, Student


def _overlaps(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    return s1 < e2 and s2 < e1


def _minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def conflicts_with_existing(calendar: Calendar, candidate: ExamSession, turnover_minutes: int) -> bool:
    """Room reuse inside the turnover buffer, or a student sitting two overlapping exams."""
    s1, e1 = candidate.start, candidate.end
    turnover = timedelta(minutes=turnover_minutes)
    cand_rooms = set(candidate.rooms)
    cand_students = set(candidate.all_students)

    for existing in calendar:
        if existing.start is None:
            continue
        s2, e2 = existing.start, existing.end

        if cand_rooms.intersection(existing.rooms):
            if _overlaps(s1, e1 + turnover, s2, e2 + turnover):
                return True

        # turnover never widens the student check
        if _overlaps(s1, e1, s2, e2) and cand_students.intersection(existing.all_students):
            return True
    return False


def sessions_by_student(calendar: Calendar) -> Dict[Student, List[ExamSession]]:
    out: Dict[Student, List[ExamSession]] = defaultdict(list)
    for s in calendar:
        for st in s.all_students:
            out[st].append(s)
    return out


def violates_student_constraints(calendar: Calendar, candidate: ExamSession, constraints: Constraints) -> bool:
    min_gap = constraints.min_minutes_between_exams
    max_per_day = constraints.max_exams_per_day
    start, end = candidate.start, candidate.end
    day = start.date()

    per_student = sessions_by_student(calendar)
    for st in candidate.all_students:
        already = [s for s in per_student.get(st, []) if s.start is not None]

        if sum(1 for s in already if s.start.date() == day) >= max_per_day:
            return True

        for ex in already:
            if _overlaps(start, end, ex.start, ex.end):
                return True
            gap = max(_minutes(start - ex.end), _minutes(ex.start - end))
            if 0 <= gap < min_gap:
                return True
    return False
