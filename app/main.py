from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import COURSE_CATALOG
from app.errors import AttendanceError
from app.routes.admin import router as admin_router
from app.routes.attendance import router as attendance_router
from app.routes.reports import router as reports_router
from app.routes.students import router as students_router
from app.services.attendance_service import AttendanceService
from app.utils.logger import setup_logging, get_logger
from app.utils.supabase_utils import RecordStore

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("🚀 Starting Exam Attendance API")
    if getattr(app.state, "service", None) is None:
        app.state.service = AttendanceService(RecordStore.from_env())
    app.state.service.load()
    yield
    logger.info("🛑 Shutting down")


async def attendance_error_handler(request: Request, exc: AttendanceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(service: Optional[AttendanceService] = None) -> FastAPI:
    """
    Builds the API. Without `service` the lifespan connects to Supabase using
    SUPABASE_URL / SUPABASE_KEY.
    """
    app = FastAPI(title="Exam Attendance API", lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AttendanceError, attendance_error_handler)

    @app.get("/health")
    def health(request: Request):
        svc = request.app.state.service
        return {
            "status": "ok",
            "students": len(svc.students) if svc else 0,
            "attendance_records": len(svc.attendance) if svc else 0,
        }

    @app.get("/courses")
    def courses():
        return [{"course_code": code, "title": title} for code, title in COURSE_CATALOG.items()]

    app.include_router(students_router, tags=["Students"])
    app.include_router(attendance_router, tags=["Attendance"])
    app.include_router(reports_router, tags=["Reports"])
    app.include_router(admin_router)
    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
