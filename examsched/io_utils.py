import csv
import io
import logging
import os
import re
from datetime import date
from pathlib import Path
from typing import IO, Callable, Dict, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .conflicts import Conflict
from .constraints import WEEKDAY_NAMES, Constraints, TimeRange
from .models import Calendar, Classroom, Course, Student

logger = logging.getLogger(__name__)

TextOrPath = Union[str, os.PathLike, IO]

# accepted header spellings per field, compared after _norm()
COLUMNS: Dict[str, Tuple[str, ...]] = {
    "student_id": ("studentid", "student", "sid", "id"),
    "student_name": ("name", "studentname", "fullname"),
    "course_code": ("coursecode", "code", "course", "cid"),
    "course_name": ("name", "coursename", "title"),
    "credit": ("credit", "credits", "ects"),
    "classroom_id": ("classroomid", "roomid", "room", "classroom", "id"),
    "capacity": ("capacity", "cap", "seats"),
}

SCHEDULE_COLUMNS = ["courseCode", "startDateTime", "durationMinutes", "roomId", "studentIds"]
CONFLICT_COLUMNS = ["type", "description", "sessions"]


def _norm(s: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]", "", (s or "").strip().lower())


def _open_text(src: TextOrPath):
    # (handle, owned): owned handles are closed by the caller
    if isinstance(src, io.BytesIO):
        src.seek(0)
        return io.TextIOWrapper(src, encoding="utf-8", newline=""), True
    if hasattr(src, "read"):
        if hasattr(src, "seek"):
            src.seek(0)
        return src, False
    if not isinstance(src, (str, os.PathLike)):
        raise TypeError(f"Cannot read CSV from {type(src).__name__}")
    path = Path(src)
    if not path.is_file():
        raise FileNotFoundError(f"CSV file not found: {path}")
    return path.open("r", newline="", encoding="utf-8"), True


def _rows(src: TextOrPath) -> Iterator[Dict[str, str]]:
    """DictReader rows keyed by normalized header, blank lines skipped."""
    f, should_close = _open_text(src)
    try:
        for row in csv.DictReader(f):
            clean = {_norm(k): (v or "").strip() for k, v in row.items() if k is not None}
            if any(clean.values()):
                yield clean
    finally:
        if should_close:
            f.close()


def _cell(row: Dict[str, str], field: str, required: bool = True) -> str:
    for alias in COLUMNS[field]:
        if alias in row:
            return row[alias]
    if required:
        raise ValueError(f"Missing column for {field} (tried {', '.join(COLUMNS[field])})")
    return ""


def _int(value: str, default: int = 0) -> int:
    value = value.strip()
    if not value:
        return default
    # spreadsheets like to export integers as 4.0
    if not re.fullmatch(r"-?\d+(\.0+)?", value):
        raise ValueError(f"Expected a whole number, got {value!r}")
    return int(value.split(".")[0])


def _ident(value: str) -> str:
    value = value.strip()
    if re.fullmatch(r"\d+\.0+", value):
        return value.split(".")[0]
    return value


def load_students(src: TextOrPath) -> List[Student]:
    return [
        Student(student_id=_ident(_cell(r, "student_id")), name=_cell(r, "student_name", required=False))
        for r in _rows(src)
    ]


def load_courses(src: TextOrPath) -> List[Course]:
    return [
        Course(
            code=_ident(_cell(r, "course_code")),
            name=_cell(r, "course_name", required=False),
            credit=_int(_cell(r, "credit", required=False)),
        )
        for r in _rows(src)
    ]


def load_classrooms(src: TextOrPath) -> List[Classroom]:
    return [
        Classroom(classroom_id=_ident(_cell(r, "classroom_id")), capacity=_int(_cell(r, "capacity")))
        for r in _rows(src)
    ]


def load_attendance(src: TextOrPath) -> Dict[str, List[str]]:
    """student id -> course codes, in file order."""
    out: Dict[str, List[str]] = {}
    for r in _rows(src):
        sid = _ident(_cell(r, "student_id"))
        code = _ident(_cell(r, "course_code"))
        if sid and code:
            out.setdefault(sid, []).append(code)
    return out


def link_attendance(students: List[Student], courses: List[Course], attendance: Dict[str, List[str]]) -> int:
    """Enroll students into courses; unknown ids are skipped. Returns links made."""
    student_by_id = {s.student_id: s for s in students}
    course_by_code = {c.code: c for c in courses}
    linked = 0
    for sid, codes in attendance.items():
        student = student_by_id.get(sid)
        if student is None:
            logger.warning("Attendance for unknown student %s skipped", sid)
            continue
        for code in codes:
            course = course_by_code.get(code)
            if course is None:
                logger.warning("Attendance for unknown course %s skipped", code)
                continue
            course.add_student(student)
            linked += 1
    return linked


def _parse_days(value: str) -> List[int]:
    days: List[int] = []
    for part in re.split(r"[;|,]", value):
        part = part.strip().upper()
        if not part:
            continue
        matches = [i for i, n in enumerate(WEEKDAY_NAMES) if n.startswith(part)]
        if len(part) < 3 or not matches:
            raise ValueError(f"Unknown weekday: {part!r}")
        days.append(matches[0])
    return days


def _parse_ranges(value: str) -> List[TimeRange]:
    return [TimeRange.parse(p) for p in re.split(r"[;|,]", value) if p.strip()]


def _parse_date(value: str) -> Optional[date]:
    return date.fromisoformat(value) if value.strip() else None


CONSTRAINT_KEYS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "minminutesbetweenexams": ("min_minutes_between_exams", _int),
    "maxexamsperday": ("max_exams_per_day", _int),
    "alloweddays": ("allowed_days", _parse_days),
    "allowedtimeranges": ("allowed_time_ranges", _parse_ranges),
    "examweekstartdate": ("exam_week_start_date", _parse_date),
    "examweekenddate": ("exam_week_end_date", _parse_date),
    "roomturnoverminutes": ("room_turnover_minutes", _int),
    "slotstepminutes": ("slot_step_minutes", _int),
    "baseexamdurationminutes": ("base_exam_duration_minutes", _int),
    "creditdurationcoefficientminutes": ("credit_duration_coefficient_minutes", _int),
    "durationroundingminutes": ("duration_rounding_minutes", _int),
    "minexamdurationminutes": ("min_exam_duration_minutes", _int),
}


def load_constraints(src: TextOrPath, base: Optional[Constraints] = None) -> Constraints:
    """Apply constraint settings on top of ``base`` (defaults when omitted).

    Two layouts are read. With a ``key`` column every row is one
    ``key,value`` pair. Without one, the header names the settings and the
    first data row holds their values; blank cells keep the base value.
    """
    constraints = base.copy() if base is not None else Constraints()
    rows = list(_rows(src))
    values: Dict[str, str] = {}
    if rows and "key" not in rows[0]:
        for header, raw in rows[0].items():
            if header not in CONSTRAINT_KEYS:
                raise ValueError(f"Unknown constraint column: {header!r}")
            if raw:
                values[header] = raw
    for r in rows:
        key = _norm(r.get("key"))
        if not key:
            continue
        if key not in CONSTRAINT_KEYS:
            raise ValueError(f"Unknown constraint key: {r.get('key')!r}")
        values[key] = r.get("value", r.get("val", ""))

    start_raw = values.pop("examweekstartdate", None)
    end_raw = values.pop("examweekenddate", None)
    for key, raw in values.items():
        attr, convert = CONSTRAINT_KEYS[key]
        setattr(constraints, attr, convert(raw))

    if start_raw is not None or end_raw is not None:
        start = _parse_date(start_raw) if start_raw is not None else constraints.exam_week_start_date
        end = _parse_date(end_raw) if end_raw is not None else constraints.exam_week_end_date
        # the pair is validated together, once both are in place
        constraints.exam_week_end_date = None
        constraints.exam_week_start_date = start
        constraints.exam_week_end_date = end
    return constraints


def schedule_frame(calendar: Calendar) -> pd.DataFrame:
    rows = []
    for s in calendar or []:
        start = s.start.isoformat() if s.start is not None else ""
        if not s.assignments:
            rows.append([s.course_code, start, s.duration_minutes, "", ""])
        for a in s.assignments:
            ids = "|".join(st.student_id for st in a.students)
            room_id = a.room.classroom_id if a.room is not None else ""
            rows.append([s.course_code, start, s.duration_minutes, room_id, ids])
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def conflicts_frame(conflicts: List[Conflict]) -> pd.DataFrame:
    rows = []
    for c in conflicts:
        sessions = ";".join(
            f"{s.course_code}@{s.start.isoformat()}" if s.start is not None else s.course_code
            for s in c.sessions
        )
        rows.append([c.type.value, c.description, sessions])
    return pd.DataFrame(rows, columns=CONFLICT_COLUMNS)


def _ensure_parent(path: Union[str, os.PathLike]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def save_schedule_csv(path: Union[str, os.PathLike], calendar: Calendar) -> int:
    _ensure_parent(path)
    df = schedule_frame(calendar)
    df.to_csv(path, index=False)
    return len(df)


def save_conflicts_csv(path: Union[str, os.PathLike], conflicts: List[Conflict]) -> int:
    _ensure_parent(path)
    df = conflicts_frame(conflicts)
    df.to_csv(path, index=False)
    return len(df)


def _write_frame(path: Union[str, os.PathLike], rows: List[list], columns: List[str]) -> int:
    _ensure_parent(path)
    df = pd.DataFrame(rows, columns=columns)
    df.to_csv(path, index=False)
    return len(df)


def save_students_csv(path: Union[str, os.PathLike], students: List[Student]) -> int:
    rows = [[s.student_id, s.name] for s in students if s is not None]
    return _write_frame(path, rows, ["studentId", "name"])


def save_courses_csv(path: Union[str, os.PathLike], courses: List[Course]) -> int:
    rows = [[c.code, c.name, c.credit] for c in courses if c is not None]
    return _write_frame(path, rows, ["courseCode", "name", "credit"])


def save_classrooms_csv(path: Union[str, os.PathLike], classrooms: List[Classroom]) -> int:
    rows = [[r.classroom_id, r.capacity] for r in classrooms if r is not None]
    return _write_frame(path, rows, ["classroomId", "capacity"])


def save_attendance_csv(path: Union[str, os.PathLike], students: List[Student]) -> int:
    """One studentId,courseCode row per enrollment, in student then course order."""
    rows = [
        [s.student_id, c.code]
        for s in students if s is not None
        for c in s.enrolled_courses
    ]
    return _write_frame(path, rows, ["studentId", "courseCode"])
