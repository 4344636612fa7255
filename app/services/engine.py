"""
Attendance aggregation rules.

Every function here is pure: it takes the student and attendance collections
as arguments, never mutates them, and recomputes its answer on each call.
Joins between the two collections go through the matric number (students'
natural key) and the course code, using linear scans; the collections are
small (hundreds to low thousands of rows).
"""

import csv
import io
import re
from datetime import datetime, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence

from app.schemas import (
    Student, CourseAttendance, CourseStats, StudentStats,
    AttendanceDetail, RosterEntry, Summary,
)

CSV_HEADER = ["Full Name", "Matric Number", "Status", "Verification Date", "Invigilator"]
PRESENT = "present"
ABSENT = "absent"


def normalize_matric(matric_number: str) -> str:
    return (matric_number or "").strip().upper()


def percentage(part: int, whole: int) -> int:
    """part / whole * 100 rounded half-up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


# -----------------------------
# Lookups and duplicate checks
# -----------------------------

def find_student(students: Iterable[Student], matric_number: str) -> Optional[Student]:
    """Case-insensitive lookup by matric number."""
    wanted = normalize_matric(matric_number)
    if not wanted:
        return None
    for student in students:
        if student.matric_number.upper() == wanted:
            return student
    return None


def check_duplicate_registration(
    students: Iterable[Student], matric_number: str, courses: Iterable[str]
) -> List[str]:
    """
    Course codes from `courses` that the student with `matric_number` is
    already enrolled in, in the order given. The matric number must already
    be normalized; it is compared exactly against stored keys.
    """
    existing = next((s for s in students if s.matric_number == matric_number), None)
    if existing is None:
        return []
    enrolled = set(existing.courses)
    return [code for code in courses if code in enrolled]


def merge_courses(existing: Iterable[str], new: Iterable[str]) -> List[str]:
    merged: List[str] = []
    for code in list(existing) + list(new):
        if code not in merged:
            merged.append(code)
    return merged


def is_already_verified(
    attendance: Iterable[CourseAttendance], matric_number: str, course_code: str
) -> bool:
    return any(
        record.matric_number == matric_number and record.course_code == course_code
        for record in attendance
    )


# -----------------------------
# Statistics
# -----------------------------

def list_courses(students: Iterable[Student]) -> List[str]:
    """Every course code any student is enrolled in, sorted."""
    return sorted({code for student in students for code in student.courses})


def students_for_course(students: Iterable[Student], course_code: str) -> List[Student]:
    return [s for s in students if course_code in s.courses]


def attendance_for_course(
    attendance: Iterable[CourseAttendance], course_code: str
) -> List[CourseAttendance]:
    return [r for r in attendance if r.course_code == course_code]


def student_attendance(
    attendance: Iterable[CourseAttendance], matric_number: str
) -> List[CourseAttendance]:
    return [r for r in attendance if r.matric_number == matric_number]


def course_stats(
    students: Sequence[Student], attendance: Sequence[CourseAttendance], course_code: str
) -> CourseStats:
    registered = len(students_for_course(students, course_code))
    attended = len(attendance_for_course(attendance, course_code))
    return CourseStats(
        course_code=course_code,
        registered=registered,
        attended=attended,
        absent=registered - attended,
        percentage=percentage(attended, registered),
    )


def all_course_stats(
    students: Sequence[Student],
    attendance: Sequence[CourseAttendance],
    course_code: Optional[str] = None,
) -> List[CourseStats]:
    courses = [course_code] if course_code else list_courses(students)
    return [course_stats(students, attendance, code) for code in courses]


def student_stats(student: Student, attendance: Sequence[CourseAttendance]) -> StudentStats:
    records = student_attendance(attendance, student.matric_number)
    return StudentStats(
        matric_number=student.matric_number,
        enrolled=len(student.courses),
        attended=len(records),
        percentage=percentage(len(records), len(student.courses)),
        attended_courses=[r.course_code for r in records],
    )


def overall_summary(students: Sequence[Student], attendance: Sequence[CourseAttendance]) -> Summary:
    return Summary(
        total_students=len(students),
        total_courses=len(list_courses(students)),
        total_enrollments=sum(len(s.courses) for s in students),
        total_attendance=len(attendance),
    )


# -----------------------------
# Course views
# -----------------------------

def course_attendance_details(
    students: Sequence[Student], attendance: Sequence[CourseAttendance], course_code: str
) -> List[AttendanceDetail]:
    """
    One entry per attendance record of the course, in collection order.
    Records whose matric number matches no student are left out.
    """
    by_matric = {s.matric_number: s for s in students}
    details = []
    for record in attendance_for_course(attendance, course_code):
        student = by_matric.get(record.matric_number)
        if student is None:
            continue
        details.append(AttendanceDetail(student=student, attendance=record, status=PRESENT))
    return details


def course_roster(
    students: Sequence[Student], attendance: Sequence[CourseAttendance], course_code: str
) -> List[RosterEntry]:
    """Every student registered for the course, marked present or absent."""
    records = {r.matric_number: r for r in attendance_for_course(attendance, course_code)}
    roster = []
    for student in students_for_course(students, course_code):
        record = records.get(student.matric_number)
        roster.append(RosterEntry(
            student=student,
            status=PRESENT if record else ABSENT,
            attendance=record,
        ))
    return roster


# -----------------------------
# Filtering
# -----------------------------

def filter_students(
    students: Iterable[Student],
    session: Optional[str] = None,
    semester: Optional[str] = None,
    query: Optional[str] = None,
) -> List[Student]:
    needle = (query or "").strip().lower()
    result = []
    for student in students:
        if session and student.session != session:
            continue
        if semester and student.semester != semester:
            continue
        if needle and needle not in student.full_name.lower() and needle not in student.matric_number.lower():
            continue
        result.append(student)
    return result


def list_sessions(students: Iterable[Student]) -> List[str]:
    """Newest session first."""
    return sorted({s.session for s in students}, reverse=True)


def list_semesters(students: Iterable[Student]) -> List[str]:
    return sorted({s.semester for s in students})


# -----------------------------
# CSV export
# -----------------------------

def format_timestamp(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Renders a timestamp the way an en-US locale does, e.g.
    '3/7/2025, 9:05:00 AM'. With `tz`, aware values are converted first.
    """
    if tz is not None and value.tzinfo is not None:
        value = value.astimezone(tz)
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return (
        f"{value.month}/{value.day}/{value.year}, "
        f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"
    )


def parse_timestamp(text: str, tz: Optional[tzinfo] = timezone.utc) -> datetime:
    """Inverse of format_timestamp; the result carries `tz` (naive when None)."""
    value = datetime.strptime(text, "%m/%d/%Y, %I:%M:%S %p")
    return value.replace(tzinfo=tz) if tz is not None else value


def export_course_csv(details: Iterable[AttendanceDetail], tz: Optional[tzinfo] = timezone.utc) -> str:
    """Dates render in `tz` (UTC unless given); naive dates are written as they are."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for detail in details:
        writer.writerow([
            detail.student.full_name,
            detail.student.matric_number,
            detail.status,
            format_timestamp(detail.attendance.verification_date, tz),
            detail.attendance.invigilator_name,
        ])
    return buffer.getvalue()


def parse_course_csv(text: str, tz: Optional[tzinfo] = timezone.utc) -> List[dict]:
    """Reads an export back by column position, dates in the zone they were written in."""
    rows = list(csv.reader(io.StringIO(text)))
    parsed = []
    for row in rows[1:]:
        if not row:
            continue
        parsed.append({
            "full_name": row[0],
            "matric_number": row[1],
            "status": row[2],
            "verification_date": parse_timestamp(row[3], tz),
            "invigilator_name": row[4],
        })
    return parsed


def export_filename(course_code: str) -> str:
    return re.sub(r"\s+", "_", course_code) + "_attendance.csv"
