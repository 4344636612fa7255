from fastapi import APIRouter, Depends

from app.dependencies import get_service, verify_admin
from app.services.attendance_service import AttendanceService
from app.utils.logger import get_logger

logger = get_logger("admin")

# All routes defined below start with /admin
router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/refresh")
def refresh(admin: bool = Depends(verify_admin), service: AttendanceService = Depends(get_service)):
    """Reloads students and attendance from Supabase."""
    students_ok = service.reload_students()
    attendance_ok = service.reload_attendance()
    logger.info("Manual refresh requested")
    return {
        "status": "success" if students_ok and attendance_ok else "partial",
        "students": len(service.students),
        "attendance_records": len(service.attendance),
    }
