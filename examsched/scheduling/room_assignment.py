import re
import sys
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from ..models import Calendar, Classroom, ExamRoomAssignment, Student


def _room_block(room_id: str) -> str:
    return re.sub(r"[^A-Za-z]", "", room_id or "")


def _room_number(room_id: str) -> int:
    digits = re.sub(r"[^0-9]", "", room_id or "")
    return int(digits) if digits else sys.maxsize


def room_sort_key(room: Classroom) -> Tuple[str, int, str]:
    """Block letters, then room number, then raw id: A101, A102, ..., M101, M116."""
    return _room_block(room.classroom_id), _room_number(room.classroom_id), room.classroom_id or ""


def sort_rooms(rooms: List[Classroom]) -> List[Classroom]:
    return sorted((r for r in rooms if r is not None), key=room_sort_key)


def free_rooms(calendar: Calendar, rooms: List[Classroom], start: datetime, duration_minutes: int,
               turnover_minutes: int) -> List[Classroom]:
    turnover = timedelta(minutes=turnover_minutes)
    end_buffered = start + timedelta(minutes=duration_minutes) + turnover
    free: List[Classroom] = []
    for room in rooms:
        busy = False
        for ex in calendar.sessions_in_room(room):
            if ex.start is None:
                continue
            if start < ex.end + turnover and ex.start < end_buffered:
                busy = True
                break
        if not busy:
            free.append(room)
    return free


def seat_students(rooms: List[Classroom], students: List[Student]) -> Optional[List[ExamRoomAssignment]]:
    """Fill rooms in order up to capacity. None when the rooms cannot seat everyone."""
    remaining = list(students)
    assignments: List[ExamRoomAssignment] = []
    for room in rooms:
        if not remaining:
            break
        if room.capacity <= 0:
            continue
        take = min(room.capacity, len(remaining))
        assignments.append(ExamRoomAssignment(room=room, students=remaining[:take]))
        remaining = remaining[take:]
    if remaining:
        return None
    return assignments
