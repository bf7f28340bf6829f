from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Set, Tuple


@dataclass(eq=False)
class Student:
    student_id: str
    name: str = ""
    enrolled_courses: List["Course"] = field(default_factory=list, repr=False)

    def enroll_in(self, course: "Course") -> None:
        # student side only; Course.add_student keeps both sides in sync
        if course is not None and course not in self.enrolled_courses:
            self.enrolled_courses.append(course)

    def drop(self, course: "Course") -> None:
        if course in self.enrolled_courses:
            self.enrolled_courses.remove(course)

    def __eq__(self, other):
        if not isinstance(other, Student):
            return NotImplemented
        return self.student_id == other.student_id

    def __hash__(self):
        return hash(self.student_id)


@dataclass(eq=False)
class Course:
    code: str
    name: str = ""
    credit: Optional[int] = 0
    enrolled_students: List[Student] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self.credit is not None and self.credit < 0:
            raise ValueError(f"credit cannot be negative for course {self.code!r}")
        # duplicates by identity are suppressed, first occurrence wins
        unique: List[Student] = []
        for s in self.enrolled_students:
            if s is not None and s not in unique:
                unique.append(s)
        self.enrolled_students = unique

    @property
    def student_count(self) -> int:
        return len(self.enrolled_students)

    def add_student(self, student: Student) -> None:
        if student is None:
            return
        if student not in self.enrolled_students:
            self.enrolled_students.append(student)
        student.enroll_in(self)

    def remove_student(self, student: Student) -> None:
        if student in self.enrolled_students:
            self.enrolled_students.remove(student)
        if student is not None:
            student.drop(self)

    def __eq__(self, other):
        if not isinstance(other, Course):
            return NotImplemented
        return self.code == other.code

    def __hash__(self):
        return hash(self.code)


@dataclass(eq=False)
class Classroom:
    classroom_id: str
    capacity: int  # <= 0 means the room cannot seat anyone

    def __eq__(self, other):
        if not isinstance(other, Classroom):
            return NotImplemented
        return self.classroom_id == other.classroom_id

    def __hash__(self):
        return hash(self.classroom_id)


@dataclass
class ExamRoomAssignment:
    room: Classroom
    students: List[Student] = field(default_factory=list)

    @property
    def student_count(self) -> int:
        return len(self.students)

    def is_over_capacity(self) -> bool:
        return self.room is not None and self.student_count > self.room.capacity


@dataclass
class ExamSession:
    course: Course
    start: datetime
    duration_minutes: int
    room_assignments: List[ExamRoomAssignment] = field(default_factory=list)

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")

    @property
    def end(self) -> Optional[datetime]:
        if self.start is None:
            return None
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def course_code(self) -> str:
        return "" if self.course is None else self.course.code

    @property
    def assignments(self) -> List[ExamRoomAssignment]:
        return [a for a in self.room_assignments if a is not None]

    @property
    def all_students(self) -> List[Student]:
        """Union of every room's students, first-seen order, no duplicates."""
        seen: Set[Student] = set()
        out: List[Student] = []
        for a in self.assignments:
            for s in a.students:
                if s is not None and s not in seen:
                    seen.add(s)
                    out.append(s)
        return out

    @property
    def total_student_count(self) -> int:
        return len(self.all_students)

    @property
    def rooms(self) -> List[Classroom]:
        out: List[Classroom] = []
        for a in self.assignments:
            if a.room is not None and a.room not in out:
                out.append(a.room)
        return out

    def uses_room(self, room: Classroom) -> bool:
        return any(a.room == room for a in self.assignments)

    def has_student(self, student: Student) -> bool:
        return any(student in a.students for a in self.assignments)


class Calendar:
    """Ordered collection of exam sessions. Enforces no scheduling rules."""

    def __init__(self, sessions=None):
        self._sessions: List[ExamSession] = []
        for s in sessions or []:
            self.add_session(s)

    @property
    def sessions(self) -> Tuple[ExamSession, ...]:
        return tuple(self._sessions)

    def add_session(self, session: ExamSession) -> None:
        if session is None:
            return
        self._sessions.append(session)

    def remove_session(self, session: ExamSession) -> None:
        if session in self._sessions:
            self._sessions.remove(session)

    def sessions_on(self, day: date) -> List[ExamSession]:
        if day is None:
            return []
        return [s for s in self._sessions if s.start is not None and s.start.date() == day]

    def sessions_in_room(self, room: Classroom) -> List[ExamSession]:
        if room is None:
            return []
        return [s for s in self._sessions if s.uses_room(room)]

    def sessions_for_student(self, student: Student) -> List[ExamSession]:
        if student is None:
            return []
        return [s for s in self._sessions if s.has_student(student)]

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ExamSession]:
        return iter(tuple(self._sessions))

    def __repr__(self) -> str:
        return f"Calendar(sessions={len(self._sessions)})"
