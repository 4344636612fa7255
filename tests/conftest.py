import os
import tempfile
from datetime import datetime, timezone

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="attendance-logs-"))

import pytest  # noqa: E402

from app.errors import StoreUnavailable, DuplicateEnrollment, AlreadyVerified  # noqa: E402
from app.schemas import Student, CourseAttendance  # noqa: E402
from app.services.attendance_service import AttendanceService  # noqa: E402
from app.utils.supabase_utils import join_courses, student_from_row, attendance_from_row  # noqa: E402

FIXED_NOW = datetime(2025, 3, 7, 9, 5, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """Same interface as RecordStore, rows kept in lists with the same unique keys."""

    def __init__(self):
        self.student_rows = []
        self.enrollment_rows = []
        self.attendance_rows = []
        self._id = 0
        self.fail_reads = False
        self.fail_writes = False
        self.fail_enrollments = False

    def _next_id(self) -> str:
        self._id += 1
        return str(self._id)

    def list_students(self):
        if self.fail_reads:
            raise StoreUnavailable("students unavailable")
        return join_courses(self.student_rows, self.enrollment_rows)

    def list_attendance(self):
        if self.fail_reads:
            raise StoreUnavailable("attendance unavailable")
        return [attendance_from_row(row) for row in self.attendance_rows]

    def insert_student(self, fields):
        if self.fail_writes:
            raise StoreUnavailable("write failed")
        if any(r["matric_number"] == fields["matric_number"] for r in self.student_rows):
            raise DuplicateEnrollment(fields["matric_number"], [])
        row = {"id": self._next_id(), **fields}
        self.student_rows.append(row)
        return student_from_row(row)

    def insert_enrollments(self, student_id, courses, matric_number=None):
        if self.fail_writes or self.fail_enrollments:
            raise StoreUnavailable("write failed")
        taken = [r["course_code"] for r in self.enrollment_rows if r["student_id"] == student_id]
        if any(code in taken for code in courses):
            raise DuplicateEnrollment(matric_number or student_id, courses)
        for code in courses:
            self.enrollment_rows.append({"id": self._next_id(), "student_id": student_id, "course_code": code})

    def insert_attendance(self, fields):
        if self.fail_writes:
            raise StoreUnavailable("write failed")
        if any(r["matric_number"] == fields["matric_number"] and r["course_code"] == fields["course_code"]
               for r in self.attendance_rows):
            raise AlreadyVerified(fields["matric_number"], fields["course_code"])
        row = {"id": self._next_id(), **fields}
        self.attendance_rows.append(row)
        return attendance_from_row(row)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(store):
    svc = AttendanceService(store, clock=lambda: FIXED_NOW)
    svc.load()
    return svc


def make_student(matric, courses, name=None, session="2024/2025", semester="First Semester", id=None):
    return Student(
        id=id or matric,
        full_name=name or f"Student {matric}",
        matric_number=matric,
        image="data:image/jpeg;base64,AAAA",
        session=session,
        semester=semester,
        courses=list(courses),
        registration_date=FIXED_NOW,
    )


def make_record(matric, course, invigilator="Dr. Okafor", when=FIXED_NOW, id=None):
    return CourseAttendance(
        id=id or f"{matric}:{course}",
        matric_number=matric,
        course_code=course,
        verification_date=when,
        invigilator_name=invigilator,
    )
