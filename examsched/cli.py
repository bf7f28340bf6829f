import argparse
import logging
from datetime import date
from typing import List, Optional

from .conflicts import detect_conflicts
from .graph_build import build_conflict_graph
from .io_utils import (
    load_attendance, load_classrooms, load_constraints, load_courses, load_students,
    link_attendance, save_conflicts_csv, save_schedule_csv
)
from .constraints import Constraints
from .scheduling.engine import SchedulingError, generate_schedule
from .scheduling.evaluation import summary

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="examsched", description="Greedy exam timetabling with conflict report")
    # Input data
    p.add_argument('--students', type=str, required=True, help='students.csv with studentId,name')
    p.add_argument('--courses', type=str, required=True, help='courses.csv with courseCode,name,credit')
    p.add_argument('--classrooms', type=str, required=True, help='classrooms.csv with classroomId,capacity')
    p.add_argument('--attendance', type=str, required=True, help='attendance.csv with studentId,courseCode')
    p.add_argument('--constraints', type=str, default=None, help='Optional key,value constraints CSV')

    # Exam week overrides
    p.add_argument('--start-date', type=date.fromisoformat, default=None, help='Exam week start (YYYY-MM-DD)')
    p.add_argument('--end-date', type=date.fromisoformat, default=None, help='Exam week end (YYYY-MM-DD)')

    # Output
    p.add_argument('--out-schedule', type=str, default='schedule.csv')
    p.add_argument('--out-conflicts', type=str, default='conflicts.csv')
    p.add_argument('--log-level', type=str, default='INFO',
                   choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return p


def _constraints(args: argparse.Namespace) -> Constraints:
    constraints = load_constraints(args.constraints) if args.constraints else Constraints()
    if args.start_date is not None or args.end_date is not None:
        start = args.start_date or constraints.exam_week_start_date
        end = args.end_date or constraints.exam_week_end_date
        constraints.exam_week_end_date = None
        constraints.exam_week_start_date = start
        constraints.exam_week_end_date = end
    return constraints


def run(args: argparse.Namespace) -> int:
    students = load_students(args.students)
    courses = load_courses(args.courses)
    classrooms = load_classrooms(args.classrooms)
    links = link_attendance(students, courses, load_attendance(args.attendance))
    logger.info("Loaded: students=%d, courses=%d, classrooms=%d, enrollments=%d",
                len(students), len(courses), len(classrooms), links)

    constraints = _constraints(args)
    logger.info("Using %r", constraints)

    calendar = generate_schedule(courses, classrooms, constraints)
    conflicts = detect_conflicts(calendar)

    print(summary(calendar, conflicts, build_conflict_graph(courses)))

    rows = save_schedule_csv(args.out_schedule, calendar)
    save_conflicts_csv(args.out_conflicts, conflicts)
    print(f"Saved: {args.out_schedule} ({rows} rows), {args.out_conflicts} ({len(conflicts)} conflicts)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)
    try:
        return run(args)
    except (SchedulingError, ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        return 1
