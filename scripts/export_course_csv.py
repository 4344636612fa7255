import sys
from pathlib import Path

# Add project root to PYTHONPATH
ROOT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT_DIR))

from app.errors import StoreUnavailable  # noqa: E402
from app.services import engine  # noqa: E402
from app.services.attendance_service import AttendanceService  # noqa: E402
from app.utils.logger import setup_logging  # noqa: E402
from app.utils.supabase_utils import RecordStore  # noqa: E402


def export_course(course_code: str, output_dir: Path) -> Path:
    """Loads everything from Supabase and writes <course>_attendance.csv into output_dir."""
    service = AttendanceService(RecordStore.from_env())
    service.load()

    details = engine.course_attendance_details(service.students, service.attendance, course_code)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / engine.export_filename(course_code)
    path.write_text(engine.export_course_csv(details), encoding="utf-8")
    print(f"✅ Exported {len(details)} record(s) for {course_code} to {path}")
    return path


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print('Usage: python scripts/export_course_csv.py "CSC 301" [output_dir]')
        sys.exit(2)

    setup_logging()
    try:
        export_course(sys.argv[1], Path(sys.argv[2]) if len(sys.argv) > 2 else Path("."))
    except StoreUnavailable as e:
        print(f"💥 Export failed: {e}")
        sys.exit(1)
