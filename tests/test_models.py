from datetime import datetime, timedelta

import pytest

from conftest import MONDAY, make_course, make_session, make_students
from examsched.models import Calendar, Classroom, Course, ExamRoomAssignment, ExamSession, Student


def test_identity_is_by_id():
    assert Student("S1", "Ann") == Student("S1", "Other name")
    assert Classroom("A101", 10) == Classroom("A101", 99)
    assert Course("CS101", "x", 3) == Course("CS101", "y", 4)
    assert len({Student("S1"), Student("S1"), Student("S2")}) == 2


def test_course_suppresses_duplicate_students_and_links_both_sides():
    s1, s2 = Student("S1"), Student("S2")
    course = Course("CS101", "Intro", 4)
    course.add_student(s1)
    course.add_student(s2)
    course.add_student(Student("S1", "duplicate"))

    assert [s.student_id for s in course.enrolled_students] == ["S1", "S2"]
    assert course in s1.enrolled_courses

    course.remove_student(s1)
    assert course.student_count == 1
    assert course not in s1.enrolled_courses


def test_course_constructor_dedupes_and_rejects_negative_credit():
    course = Course("CS1", enrolled_students=[Student("S1"), Student("S1"), Student("S2")])
    assert course.student_count == 2
    with pytest.raises(ValueError):
        Course("CS2", credit=-1)


def test_course_credit_may_be_unknown():
    course = Course("CS3", credit=None)
    assert course.credit is None
    assert course.student_count == 0


def test_session_derived_fields():
    a, b = Classroom("A101", 2), Classroom("A102", 2)
    s1, s2, s3 = make_students("S", 3)
    course = make_course("CS101", [s1, s2, s3])
    start = datetime.combine(MONDAY, datetime.min.time()).replace(hour=9)
    session = make_session(course, start, 150, (a, [s1, s2]), (b, [s3, s1]))

    assert session.end == start + timedelta(minutes=150)
    assert session.all_students == [s1, s2, s3]
    assert session.total_student_count == 3
    assert session.rooms == [a, b]
    assert session.course_code == "CS101"


def test_session_skips_missing_assignments():
    room = Classroom("A101", 5)
    s1, s2 = make_students("S", 2)
    session = ExamSession(course=Course("CS101"), start=datetime(2026, 1, 5, 9), duration_minutes=120,
                          room_assignments=[None, ExamRoomAssignment(room, [s1, s2])])

    assert session.all_students == [s1, s2]
    assert session.rooms == [room]
    assert session.uses_room(room)
    assert session.has_student(s2)


def test_session_duration_must_be_positive():
    with pytest.raises(ValueError):
        ExamSession(course=Course("X"), start=datetime(2026, 1, 5, 9), duration_minutes=0)


def test_assignment_over_capacity():
    room = Classroom("A101", 2)
    assert ExamRoomAssignment(room, make_students("S", 3)).is_over_capacity()
    assert not ExamRoomAssignment(room, make_students("S", 2)).is_over_capacity()


def test_calendar_queries():
    a, b = Classroom("A101", 10), Classroom("B201", 10)
    s1, s2 = make_students("S", 2)
    c1, c2 = make_course("C1", [s1]), make_course("C2", [s2])
    x = make_session(c1, datetime(2026, 1, 5, 9), 120, (a, [s1]))
    y = make_session(c2, datetime(2026, 1, 6, 9), 120, (b, [s2]))

    cal = Calendar()
    cal.add_session(x)
    cal.add_session(None)
    cal.add_session(y)

    assert cal.sessions == (x, y)
    assert len(cal) == 2
    assert cal.sessions_on(MONDAY) == [x]
    assert cal.sessions_in_room(b) == [y]
    assert cal.sessions_for_student(s1) == [x]
    assert cal.sessions_for_student(Student("nobody")) == []

    cal.remove_session(x)
    assert cal.sessions == (y,)


def test_calendar_sessions_view_is_read_only():
    cal = Calendar()
    with pytest.raises(AttributeError):
        cal.sessions.append("x")
