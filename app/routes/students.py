from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from app.dependencies import get_service
from app.schemas import Student, StudentCreate, StudentStats, RegistrationResult
from app.services import engine
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/students")


@router.get("", response_model=List[Student])
def list_students(
    session: Optional[str] = None,
    semester: Optional[str] = None,
    q: Optional[str] = Query(None, description="Search by name or matric number"),
    service: AttendanceService = Depends(get_service),
):
    return engine.filter_students(service.students, session=session, semester=semester, query=q)


@router.get("/filters")
def get_filters(service: AttendanceService = Depends(get_service)):
    """Session and semester values present in the student collection."""
    return {
        "sessions": engine.list_sessions(service.students),
        "semesters": engine.list_semesters(service.students),
    }


@router.get("/lookup", response_model=Student)
def lookup_student(matric_number: str, service: AttendanceService = Depends(get_service)):
    # Matric numbers contain slashes, so they travel as a query parameter
    return service.lookup_student(matric_number)


@router.get("/stats", response_model=StudentStats)
def get_student_stats(matric_number: str, service: AttendanceService = Depends(get_service)):
    student = service.lookup_student(matric_number)
    return engine.student_stats(student, service.attendance)


@router.post("", response_model=RegistrationResult, status_code=201)
def register_student(payload: StudentCreate, service: AttendanceService = Depends(get_service)):
    return service.register_student(
        full_name=payload.full_name,
        matric_number=payload.matric_number,
        image=payload.image,
        courses=payload.courses,
        session=payload.session,
        semester=payload.semester,
    )
