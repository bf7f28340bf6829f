"""
Pytest fixtures shared by the examsched tests.
"""

import logging
from datetime import date, datetime, time

import pytest

from examsched.constraints import Constraints, TimeRange
from examsched.models import Classroom, Course, ExamRoomAssignment, ExamSession, Student

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# 2026-01-05 is a Monday
MONDAY = date(2026, 1, 5)


def make_students(prefix: str, n: int, start: int = 1):
    return [Student(f"{prefix}{i}", f"Student {prefix}{i}") for i in range(start, start + n)]


def make_course(code: str, students, credit: int = 0) -> Course:
    course = Course(code=code, name=f"Course {code}", credit=credit)
    for s in students:
        course.add_student(s)
    return course


def make_session(course: Course, start: datetime, minutes: int, *assignments) -> ExamSession:
    return ExamSession(course=course, start=start, duration_minutes=minutes,
                       room_assignments=[ExamRoomAssignment(room, list(sts)) for room, sts in assignments])


@pytest.fixture
def monday():
    return MONDAY


@pytest.fixture
def constraints():
    """Defaults, but with a fixed exam week starting on a Monday."""
    return Constraints(
        allowed_time_ranges=[TimeRange(time(9, 0), time(17, 0))],
        exam_week_start_date=MONDAY,
    )


@pytest.fixture
def rooms():
    return [Classroom("A101", 10), Classroom("A102", 10), Classroom("A103", 10)]
