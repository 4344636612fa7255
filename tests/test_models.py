from app.models import schema_ddl


def test_schema_declares_all_tables_in_dependency_order():
    ddl = schema_ddl()
    students = ddl.index("CREATE TABLE students")
    assert students < ddl.index("CREATE TABLE student_courses")
    assert students < ddl.index("CREATE TABLE attendance_records")


def test_schema_enforces_uniqueness():
    ddl = schema_ddl()
    assert "UNIQUE (matric_number, course_code)" in ddl
    assert "UNIQUE (student_id, course_code)" in ddl
    assert "UNIQUE (matric_number)" in ddl


def test_schema_uses_server_side_defaults():
    ddl = schema_ddl()
    assert "DEFAULT gen_random_uuid()" in ddl
    assert "DEFAULT now()" in ddl
    assert "CREATE INDEX" in ddl
