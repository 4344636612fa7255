from typing import Iterable


class AttendanceError(Exception):
    """Base class for every rejected registration / verification."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingField(AttendanceError):
    """A required registration field is empty."""

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required field(s): {', '.join(self.fields)}")


class DuplicateEnrollment(AttendanceError):
    """Student is already registered for the requested course(s)."""
    status_code = 409

    def __init__(self, matric_number: str, courses: Iterable[str]):
        self.matric_number = matric_number
        self.courses = list(courses)
        if self.courses:
            message = f"Student {matric_number} is already registered for: {', '.join(self.courses)}"
        else:
            message = f"Student {matric_number} is already registered"
        super().__init__(message)


class StudentNotFound(AttendanceError):
    status_code = 404

    def __init__(self, matric_number: str):
        self.matric_number = matric_number
        super().__init__(f"Student not found: {matric_number}")


class MissingSelection(AttendanceError):
    """No course chosen or invigilator name left blank."""


class NotEnrolled(MissingSelection):
    def __init__(self, matric_number: str, course_code: str):
        self.matric_number = matric_number
        self.course_code = course_code
        super().__init__(f"Student {matric_number} is not registered for {course_code}")


class AlreadyVerified(AttendanceError):
    status_code = 409

    def __init__(self, matric_number: str, course_code: str):
        self.matric_number = matric_number
        self.course_code = course_code
        super().__init__(
            f"Student {matric_number} has already been verified for {course_code}"
        )


class StoreUnavailable(AttendanceError):
    """The Supabase call failed (network, auth, or an unexpected API error)."""
    status_code = 503
