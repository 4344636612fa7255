from typing import Dict, Iterable, List, Optional
from supabase import create_client, Client
from postgrest.exceptions import APIError

from app.config import (
    SUPABASE_URL, SUPABASE_KEY,
    STUDENTS_TABLE, ENROLLMENTS_TABLE, ATTENDANCE_TABLE,
)
from app.errors import StoreUnavailable, DuplicateEnrollment, AlreadyVerified
from app.schemas import Student, CourseAttendance
from app.utils.logger import get_logger

logger = get_logger("store")

# Postgres error code for a unique constraint violation
UNIQUE_VIOLATION = "23505"


def _normalize_list_response(resp) -> List[dict]:
    """Ensures we get a list of rows regardless of SDK version."""
    if resp is None:
        return []
    data = getattr(resp, "data", resp)
    if isinstance(data, dict):
        for key in ("data", "rows"):
            if key in data and isinstance(data[key], list):
                return data[key]
        return [data]
    if isinstance(data, list):
        return data
    return []


def is_unique_violation(error: Exception) -> bool:
    return isinstance(error, APIError) and str(getattr(error, "code", "")) == UNIQUE_VIOLATION


def student_from_row(row: dict, courses: Optional[List[str]] = None) -> Student:
    return Student(
        id=str(row["id"]),
        full_name=row.get("full_name") or "",
        matric_number=row.get("matric_number") or "",
        image=row.get("image") or "",
        session=row.get("session") or "",
        semester=row.get("semester") or "",
        courses=courses or [],
        registration_date=row.get("registration_date"),
    )


def attendance_from_row(row: dict) -> CourseAttendance:
    return CourseAttendance(
        id=str(row["id"]),
        matric_number=row["matric_number"],
        course_code=row["course_code"],
        verification_date=row["verification_date"],
        invigilator_name=row.get("invigilator_name") or "",
    )


def join_courses(student_rows: Iterable[dict], enrollment_rows: Iterable[dict]) -> List[Student]:
    """
    Builds Student objects with their course lists.

    Enrollments are indexed by student id once, so the join is linear in the
    number of rows. A course code listed twice for a student is kept once.
    """
    courses_by_student: Dict[str, List[str]] = {}
    for row in enrollment_rows:
        codes = courses_by_student.setdefault(str(row["student_id"]), [])
        if row["course_code"] not in codes:
            codes.append(row["course_code"])

    return [
        student_from_row(row, courses_by_student.get(str(row["id"]), []))
        for row in student_rows
    ]


class RecordStore:
    """
    Thin wrapper over the Supabase tables holding students, enrollments and
    attendance records. Every failure surfaces as StoreUnavailable, except a
    unique-constraint violation on insert which maps to the matching
    duplicate error.
    """

    def __init__(
        self,
        client: Client,
        students_table: str = STUDENTS_TABLE,
        enrollments_table: str = ENROLLMENTS_TABLE,
        attendance_table: str = ATTENDANCE_TABLE,
    ):
        self.client = client
        self.students_table = students_table
        self.enrollments_table = enrollments_table
        self.attendance_table = attendance_table

    @classmethod
    def from_env(cls, url: str = SUPABASE_URL, key: str = SUPABASE_KEY) -> "RecordStore":
        if not url or not key:
            raise StoreUnavailable("Supabase credentials not found in environment variables.")
        try:
            client = create_client(url, key)
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise StoreUnavailable(f"Failed to initialize Supabase client: {e}") from e
        return cls(client)

    # --- reads ---

    def _select_all(self, table: str) -> List[dict]:
        try:
            resp = self.client.table(table).select("*").execute()
        except Exception as e:
            logger.error(f"Error loading {table}: {e}")
            raise StoreUnavailable(f"Could not load {table}: {e}") from e
        return _normalize_list_response(resp)

    def list_student_rows(self) -> List[dict]:
        return self._select_all(self.students_table)

    def list_enrollments(self) -> List[dict]:
        return self._select_all(self.enrollments_table)

    def list_students(self) -> List[Student]:
        return join_courses(self.list_student_rows(), self.list_enrollments())

    def list_attendance(self) -> List[CourseAttendance]:
        return [attendance_from_row(row) for row in self._select_all(self.attendance_table)]

    # --- writes ---

    def _insert(self, table: str, payload) -> List[dict]:
        try:
            resp = self.client.table(table).insert(payload).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise
            logger.error(f"Error inserting into {table}: {e}")
            raise StoreUnavailable(f"Could not write to {table}: {e}") from e
        return _normalize_list_response(resp)

    def insert_student(self, fields: dict) -> Student:
        try:
            rows = self._insert(self.students_table, fields)
        except APIError as e:
            # Only reachable on a unique violation: the matric number exists already
            logger.warning(f"Student {fields.get('matric_number')} already exists in store: {e}")
            raise DuplicateEnrollment(fields.get("matric_number", ""), []) from e
        if not rows:
            raise StoreUnavailable(f"Insert into {self.students_table} returned no row")
        return student_from_row(rows[0])

    def insert_enrollments(self, student_id: str, courses: Iterable[str], matric_number: Optional[str] = None) -> None:
        courses = list(courses)
        payload = [{"student_id": student_id, "course_code": code} for code in courses]
        if not payload:
            return
        try:
            self._insert(self.enrollments_table, payload)
        except APIError as e:
            logger.warning(f"Enrollment rejected by store for student {student_id}: {e}")
            raise DuplicateEnrollment(matric_number or student_id, courses) from e

    def insert_attendance(self, fields: dict) -> CourseAttendance:
        try:
            rows = self._insert(self.attendance_table, fields)
        except APIError as e:
            logger.warning(f"Attendance rejected by store: {e}")
            raise AlreadyVerified(fields.get("matric_number", ""), fields.get("course_code", "")) from e
        if not rows:
            raise StoreUnavailable(f"Insert into {self.attendance_table} returned no row")
        return attendance_from_row(rows[0])
