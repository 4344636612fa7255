from typing import List, Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.dependencies import get_service
from app.schemas import CourseStats, AttendanceDetail, RosterEntry, Summary
from app.services import engine
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/reports")


@router.get("/courses", response_model=List[CourseStats])
def get_course_stats(course_code: Optional[str] = None, service: AttendanceService = Depends(get_service)):
    """Registered / attended counts per course (all courses unless one is selected)."""
    return engine.all_course_stats(service.students, service.attendance, course_code)


@router.get("/courses/detail", response_model=List[AttendanceDetail])
def get_course_detail(course_code: str, service: AttendanceService = Depends(get_service)):
    return engine.course_attendance_details(service.students, service.attendance, course_code)


@router.get("/courses/roster", response_model=List[RosterEntry])
def get_course_roster(course_code: str, service: AttendanceService = Depends(get_service)):
    return engine.course_roster(service.students, service.attendance, course_code)


@router.get("/courses/export")
def export_course(course_code: str, service: AttendanceService = Depends(get_service)):
    details = engine.course_attendance_details(service.students, service.attendance, course_code)
    filename = engine.export_filename(course_code)
    return Response(
        content=engine.export_course_csv(details),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/summary", response_model=Summary)
def get_summary(service: AttendanceService = Depends(get_service)):
    return engine.overall_summary(service.students, service.attendance)
