"""
Conflict detection for a finished calendar.

Three independent passes, reported in this order:
    ROOM_CAPACITY      a room holds more students than it seats
    ROOM_OVERLAP       two time-overlapping sessions share a room
    STUDENT_COLLISION  two time-overlapping sessions share a student
Overlap rule: start < other_end AND other_start < end (touching is fine).

Works on any calendar, including ones edited or built outside the engine,
and never raises: problems are returned as data.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import Calendar, Classroom, ExamSession, Student

logger = logging.getLogger(__name__)


class ConflictType(Enum):
    ROOM_CAPACITY = "ROOM_CAPACITY"
    ROOM_OVERLAP = "ROOM_OVERLAP"
    STUDENT_COLLISION = "STUDENT_COLLISION"


@dataclass(frozen=True)
class Conflict:
    type: ConflictType
    sessions: Tuple[ExamSession, ...]
    description: str


@dataclass
class _SessionInfo:
    session: ExamSession
    start: datetime
    end: datetime
    rooms: List[Classroom]
    students: List[Student]


def _info(session: ExamSession) -> Optional[_SessionInfo]:
    if session is None or session.start is None:
        return None
    return _SessionInfo(session, session.start, session.end, session.rooms, session.all_students)


def _overlaps(a: _SessionInfo, b: _SessionInfo) -> bool:
    return a.start < b.end and b.start < a.end


def _capacity_conflicts(infos: List[_SessionInfo]) -> List[Conflict]:
    out: List[Conflict] = []
    for si in infos:
        for a in si.session.assignments:
            if a.room is None or not a.is_over_capacity():
                continue
            desc = (f"Room capacity exceeded: {a.room.classroom_id} "
                    f"(assigned={a.student_count}, capacity={a.room.capacity})")
            out.append(Conflict(ConflictType.ROOM_CAPACITY, (si.session,), desc))
    return out


def _overlapping_pairs(infos: List[_SessionInfo]):
    # O(n^2) is fine for a term's worth of exams
    for i in range(len(infos)):
        for j in range(i + 1, len(infos)):
            if _overlaps(infos[i], infos[j]):
                yield infos[i], infos[j]


def _room_overlaps(infos: List[_SessionInfo]) -> List[Conflict]:
    out: List[Conflict] = []
    for a, b in _overlapping_pairs(infos):
        for room in a.rooms:
            if room in b.rooms:
                out.append(Conflict(ConflictType.ROOM_OVERLAP, (a.session, b.session),
                                    f"Room overlap: {room.classroom_id}"))
    return out


def _student_collisions(infos: List[_SessionInfo]) -> List[Conflict]:
    out: List[Conflict] = []
    for a, b in _overlapping_pairs(infos):
        b_students = set(b.students)
        for st in a.students:
            if st in b_students:
                out.append(Conflict(ConflictType.STUDENT_COLLISION, (a.session, b.session),
                                    f"Student collision: {st.student_id}"))
    return out


def detect_conflicts(calendar: Optional[Calendar]) -> List[Conflict]:
    if not calendar:
        return []
    infos = [si for si in (_info(s) for s in calendar.sessions) if si is not None]

    conflicts: List[Conflict] = []
    conflicts.extend(_capacity_conflicts(infos))
    conflicts.extend(_room_overlaps(infos))
    conflicts.extend(_student_collisions(infos))
    logger.debug("Checked %d sessions, %d conflicts", len(infos), len(conflicts))
    return conflicts


def has_conflicts(calendar: Optional[Calendar]) -> bool:
    return bool(detect_conflicts(calendar))


def conflict_counts(conflicts: List[Conflict]) -> Dict[ConflictType, int]:
    counts = Counter(c.type for c in conflicts)
    return {t: counts[t] for t in ConflictType if counts[t]}
