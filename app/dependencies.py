from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config import ADMIN_SECRET
from app.services.attendance_service import AttendanceService

# Define security scheme
security = HTTPBearer()


def get_service(request: Request) -> AttendanceService:
    """The AttendanceService created in the app lifespan."""
    return request.app.state.service


def verify_admin(token: HTTPAuthorizationCredentials = Depends(security)):
    """Dependency to check if the provided token matches the ADMIN_SECRET."""
    if not ADMIN_SECRET or token.credentials != ADMIN_SECRET:
        raise HTTPException(status_code=403, detail="Forbidden: Invalid Admin Key")
    return True
