from typing import List, Optional
from fastapi import APIRouter, Depends

from app.dependencies import get_service
from app.schemas import CourseAttendance, AttendanceCreate
from app.services import engine
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance")


@router.get("", response_model=List[CourseAttendance])
def get_attendance(matric_number: Optional[str] = None, service: AttendanceService = Depends(get_service)):
    """All attendance records, or one student's."""
    if matric_number:
        student = service.lookup_student(matric_number)
        return engine.student_attendance(service.attendance, student.matric_number)
    return service.attendance


@router.get("/check")
def check_attendance(matric_number: str, course_code: str, service: AttendanceService = Depends(get_service)):
    return {
        "matric_number": engine.normalize_matric(matric_number),
        "course_code": course_code,
        "verified": service.is_verified(matric_number, course_code),
    }


@router.post("", response_model=CourseAttendance, status_code=201)
def mark_attendance(payload: AttendanceCreate, service: AttendanceService = Depends(get_service)):
    return service.mark_attendance(
        matric_number=payload.matric_number,
        course_code=payload.course_code,
        invigilator_name=payload.invigilator_name,
    )
