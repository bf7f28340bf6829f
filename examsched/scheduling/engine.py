"""
Greedy earliest-fit exam placement.

Courses are placed one at a time, largest enrollment first, at the first
day/slot where enough free rooms can seat every student without breaking
a room, student or spacing rule. A placed course is never revisited, and a
course that fits nowhere in the search horizon aborts the whole run.
"""

import logging
from datetime import date
from typing import List, Optional

from ..constraints import Constraints
from ..models import Calendar, Classroom, Course, ExamSession
from .room_assignment import free_rooms, seat_students, sort_rooms
from .slots import candidate_starts, estimate_duration, fits_time_ranges, search_days
from .validation import conflicts_with_existing, violates_student_constraints

logger = logging.getLogger(__name__)


class SchedulingError(RuntimeError):
    """A course could not be placed anywhere in the search horizon."""


def order_courses(courses: List[Course]) -> List[Course]:
    remaining = [c for c in courses if c is not None and c.enrolled_students]
    return sorted(remaining, key=lambda c: (-c.student_count, c.code or ""))


def _place(course: Course, calendar: Calendar, rooms: List[Classroom], days: List[date],
           constraints: Constraints) -> Optional[ExamSession]:
    duration = estimate_duration(course, constraints)
    turnover = constraints.room_turnover_minutes
    for day in days:
        if not constraints.is_day_allowed(day):
            continue
        for start in candidate_starts(day, constraints):
            if not fits_time_ranges(start, duration, constraints):
                continue
            available = free_rooms(calendar, rooms, start, duration, turnover)
            if not available:
                continue
            assignments = seat_students(available, course.enrolled_students)
            if not assignments:
                continue
            candidate = ExamSession(course=course, start=start, duration_minutes=duration,
                                    room_assignments=assignments)
            if conflicts_with_existing(calendar, candidate, turnover):
                continue
            if violates_student_constraints(calendar, candidate, constraints):
                continue
            return candidate
    return None


def generate_schedule(courses: List[Course], classrooms: List[Classroom],
                      constraints: Optional[Constraints] = None, today: Optional[date] = None) -> Calendar:
    """Build a fresh Calendar for ``courses``.

    Raises ValueError for missing inputs or an inverted exam week and
    SchedulingError when a course cannot be placed; no partial calendar is
    returned in either case.
    """
    if courses is None or classrooms is None:
        raise ValueError("courses/classrooms cannot be None")
    if constraints is None:
        constraints = Constraints()

    ordered = order_courses(courses)
    rooms = sort_rooms(classrooms)
    days = search_days(constraints, today=today)
    logger.info("Scheduling %d courses into %d rooms over %d days (%s..%s)",
                len(ordered), len(rooms), len(days),
                days[0] if days else None, days[-1] if days else None)

    calendar = Calendar()
    for course in ordered:
        session = _place(course, calendar, rooms, days, constraints)
        if session is None:
            logger.error("No slot for course %s (%d students)", course.code, course.student_count)
            raise SchedulingError(f"Could not schedule course: {course.code or ''}")
        calendar.add_session(session)
        logger.debug("Placed %s at %s for %d min in %s", course.code, session.start.isoformat(),
                     session.duration_minutes, ",".join(r.classroom_id for r in session.rooms))

    logger.info("Schedule generated: sessions=%d", len(calendar))
    return calendar


class SchedulingEngine:
    """Stateless wrapper; every call to generate() starts from an empty calendar."""

    def __init__(self, today: Optional[date] = None):
        self.today = today

    def generate(self, courses: List[Course], classrooms: List[Classroom],
                 constraints: Optional[Constraints] = None) -> Calendar:
        return generate_schedule(courses, classrooms, constraints, today=self.today)
