"""
Prints the PostgreSQL DDL for the students, student_courses and
attendance_records tables. Paste the output into the Supabase SQL editor,
or pass a path to write it to a file:

    python scripts/create_schema.py schema.sql
"""
import sys
from pathlib import Path

# Add project root to PYTHONPATH
ROOT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT_DIR))

from app.models import schema_ddl  # noqa: E402


def main(argv):
    ddl = schema_ddl()
    if len(argv) > 1:
        Path(argv[1]).write_text(ddl, encoding="utf-8")
        print(f"✅ Schema written to {argv[1]}")
    else:
        print(ddl)


if __name__ == "__main__":
    main(sys.argv)
