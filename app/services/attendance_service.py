"""
Application state and write paths.

AttendanceService keeps copy-on-load snapshots of the student and attendance
collections. Reads always go through the pure functions in
app.services.engine; after every successful write the affected collection is
reloaded in full from the store.
"""

from datetime import datetime, timezone
from typing import List, Optional

from app.config import DEFAULT_SESSION, DEFAULT_SEMESTER
from app.errors import (
    AttendanceError, MissingField, DuplicateEnrollment, StudentNotFound,
    MissingSelection, NotEnrolled, AlreadyVerified, StoreUnavailable,
)
from app.schemas import Student, CourseAttendance, RegistrationResult
from app.services import engine
from app.utils.logger import get_logger

logger = get_logger("service")


def utc_now() -> datetime:
    # Whole seconds, the precision of the CSV export
    return datetime.now(timezone.utc).replace(microsecond=0)


def _clean_courses(courses) -> List[str]:
    cleaned: List[str] = []
    for code in courses or []:
        code = (code or "").strip()
        if code and code not in cleaned:
            cleaned.append(code)
    return cleaned


class AttendanceService:
    def __init__(self, store, clock=utc_now):
        self.store = store
        self.clock = clock
        self.students: List[Student] = []
        self.attendance: List[CourseAttendance] = []

    # -----------------------------
    # Loading
    # -----------------------------

    def load(self) -> None:
        self.reload_students()
        self.reload_attendance()

    def reload_students(self) -> bool:
        """Replaces the student snapshot. On failure the old snapshot stays."""
        try:
            self.students = self.store.list_students()
        except StoreUnavailable as e:
            logger.error(f"Error loading students, keeping {len(self.students)} cached: {e}")
            return False
        logger.info(f"Loaded {len(self.students)} students")
        return True

    def reload_attendance(self) -> bool:
        try:
            self.attendance = self.store.list_attendance()
        except StoreUnavailable as e:
            logger.error(f"Error loading attendance, keeping {len(self.attendance)} cached: {e}")
            return False
        logger.info(f"Loaded {len(self.attendance)} attendance records")
        return True

    # -----------------------------
    # Registration
    # -----------------------------

    def register_student(
        self,
        full_name: str,
        matric_number: str,
        image: str,
        courses,
        session: Optional[str] = None,
        semester: Optional[str] = None,
    ) -> RegistrationResult:
        full_name = (full_name or "").strip()
        matric_number = engine.normalize_matric(matric_number)
        courses = _clean_courses(courses)

        missing = [
            name for name, value in (
                ("full_name", full_name),
                ("matric_number", matric_number),
                ("image", image),
                ("courses", courses),
            ) if not value
        ]
        if missing:
            logger.warning(f"Registration rejected, missing: {', '.join(missing)}")
            raise MissingField(missing)

        existing = engine.find_student(self.students, matric_number)
        if existing is None:
            return self._create_student(
                full_name, matric_number, image, courses,
                session or DEFAULT_SESSION, semester or DEFAULT_SEMESTER,
            )
        return self._add_courses(existing, courses)

    def _create_student(self, full_name, matric_number, image, courses, session, semester):
        try:
            student = self.store.insert_student({
                "full_name": full_name,
                "matric_number": matric_number,
                "image": image,
                "session": session,
                "semester": semester,
                "registration_date": self.clock().isoformat(),
            })
        except DuplicateEnrollment:
            # Registered meanwhile by another writer
            logger.warning(f"Student {matric_number} was not in the snapshot but exists in store")
            self.reload_students()
            raise
        try:
            self.store.insert_enrollments(student.id, courses, matric_number)
        except AttendanceError:
            # No rollback: the student row stays without enrollments
            logger.error(f"Student {matric_number} saved without courses (id={student.id})")
            self.reload_students()
            raise
        self.reload_students()
        logger.info(f"Registered {matric_number} for {', '.join(courses)}")

        stored = engine.find_student(self.students, matric_number)
        if stored is None:
            stored = student.model_copy(update={"courses": courses})
        return RegistrationResult(student=stored, created=True, added_courses=courses, skipped_courses=[])

    def _add_courses(self, existing: Student, courses: List[str]) -> RegistrationResult:
        duplicates = engine.check_duplicate_registration(self.students, existing.matric_number, courses)
        new_courses = [code for code in courses if code not in duplicates]
        if not new_courses:
            logger.warning(f"Registration rejected, {existing.matric_number} already has {', '.join(duplicates)}")
            raise DuplicateEnrollment(existing.matric_number, duplicates)

        try:
            self.store.insert_enrollments(existing.id, new_courses, existing.matric_number)
        except AttendanceError:
            self.reload_students()
            raise
        self.reload_students()
        logger.info(f"Added {', '.join(new_courses)} to {existing.matric_number}")

        stored = engine.find_student(self.students, existing.matric_number)
        if stored is None or not set(new_courses) <= set(stored.courses):
            stored = existing.model_copy(update={"courses": engine.merge_courses(existing.courses, new_courses)})
        return RegistrationResult(
            student=stored, created=False, added_courses=new_courses, skipped_courses=duplicates,
        )

    # -----------------------------
    # Verification
    # -----------------------------

    def lookup_student(self, matric_number: str) -> Student:
        student = engine.find_student(self.students, matric_number)
        if student is None:
            raise StudentNotFound(engine.normalize_matric(matric_number))
        return student

    def is_verified(self, matric_number: str, course_code: str) -> bool:
        student = engine.find_student(self.students, matric_number)
        matric = student.matric_number if student else engine.normalize_matric(matric_number)
        return engine.is_already_verified(self.attendance, matric, (course_code or "").strip())

    def mark_attendance(self, matric_number: str, course_code: str, invigilator_name: str) -> CourseAttendance:
        student = self.lookup_student(matric_number)
        course_code = (course_code or "").strip()
        invigilator_name = (invigilator_name or "").strip()

        if not course_code or not invigilator_name:
            raise MissingSelection("Please select a course and enter invigilator name.")
        if course_code not in student.courses:
            raise NotEnrolled(student.matric_number, course_code)
        if engine.is_already_verified(self.attendance, student.matric_number, course_code):
            logger.warning(f"{student.matric_number} already verified for {course_code}")
            raise AlreadyVerified(student.matric_number, course_code)

        try:
            record = self.store.insert_attendance({
                "matric_number": student.matric_number,
                "course_code": course_code,
                "verification_date": self.clock().isoformat(),
                "invigilator_name": invigilator_name,
            })
        except AlreadyVerified:
            self.reload_attendance()
            raise
        self.reload_attendance()
        logger.info(f"Marked {student.matric_number} present for {course_code} by {invigilator_name}")
        return record
