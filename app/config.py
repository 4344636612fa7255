import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# -----------------------------
# Project paths
# -----------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "logs")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -----------------------------
# Supabase
# -----------------------------
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

STUDENTS_TABLE = os.getenv("STUDENTS_TABLE", "students")
ENROLLMENTS_TABLE = os.getenv("ENROLLMENTS_TABLE", "student_courses")
ATTENDANCE_TABLE = os.getenv("ATTENDANCE_TABLE", "attendance_records")

# Bearer token for /admin routes
ADMIN_SECRET = os.getenv("ADMIN_SECRET", "")

# -----------------------------
# Registration defaults
# -----------------------------
DEFAULT_SESSION = os.getenv("DEFAULT_SESSION", "2024/2025")
DEFAULT_SEMESTER = os.getenv("DEFAULT_SEMESTER", "First Semester")

# Longest edge (pixels) of a stored student photo
PHOTO_MAX_SIZE = int(os.getenv("PHOTO_MAX_SIZE", "320"))

COURSE_CATALOG = {
    "CSC 301": "Data Structures",
    "CSC 302": "Computer Architecture",
    "CSC 303": "Database Systems",
    "CSC 304": "Software Engineering",
    "CSC 305": "Operating Systems",
    "MTH 301": "Numerical Analysis",
    "MTH 302": "Linear Algebra",
    "STA 301": "Statistics",
    "PHY 301": "Physics III",
    "ENG 301": "Technical Writing",
}
