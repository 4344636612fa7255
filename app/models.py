from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint, text
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import CreateIndex, CreateTable

from app.config import STUDENTS_TABLE, ENROLLMENTS_TABLE, ATTENDANCE_TABLE

Base = declarative_base()

# Supabase generates ids and timestamps server-side
UUID_DEFAULT = text("gen_random_uuid()")
NOW_DEFAULT = text("now()")


class Student(Base):
    """Student information."""
    __tablename__ = STUDENTS_TABLE

    id = Column(postgresql.UUID(as_uuid=False), primary_key=True, server_default=UUID_DEFAULT)
    full_name = Column(String, nullable=False)
    matric_number = Column(String, nullable=False, unique=True)
    image = Column(Text, nullable=False)
    session = Column(String, nullable=False)
    semester = Column(String, nullable=False)
    registration_date = Column(DateTime(timezone=True), server_default=NOW_DEFAULT)
    created_at = Column(DateTime(timezone=True), server_default=NOW_DEFAULT)

    def __repr__(self):
        return f"<Student(matric_number={self.matric_number}, full_name={self.full_name})>"


class StudentCourse(Base):
    """One course enrollment of a student."""
    __tablename__ = ENROLLMENTS_TABLE
    __table_args__ = (
        UniqueConstraint("student_id", "course_code", name="uq_student_course"),
    )

    id = Column(postgresql.UUID(as_uuid=False), primary_key=True, server_default=UUID_DEFAULT)
    student_id = Column(postgresql.UUID(as_uuid=False), ForeignKey(f"{STUDENTS_TABLE}.id"), nullable=False, index=True)
    course_code = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=NOW_DEFAULT)

    def __repr__(self):
        return f"<StudentCourse(student_id={self.student_id}, course_code={self.course_code})>"


class AttendanceRecord(Base):
    """Exam attendance verification records."""
    __tablename__ = ATTENDANCE_TABLE
    __table_args__ = (
        UniqueConstraint("matric_number", "course_code", name="uq_attendance_matric_course"),
    )

    id = Column(postgresql.UUID(as_uuid=False), primary_key=True, server_default=UUID_DEFAULT)
    matric_number = Column(String, ForeignKey(f"{STUDENTS_TABLE}.matric_number"), nullable=False, index=True)
    course_code = Column(String, nullable=False, index=True)
    verification_date = Column(DateTime(timezone=True), server_default=NOW_DEFAULT)
    invigilator_name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=NOW_DEFAULT)

    def __repr__(self):
        return f"<AttendanceRecord(matric_number={self.matric_number}, course_code={self.course_code})>"


def schema_ddl() -> str:
    """PostgreSQL CREATE TABLE statements for all tables, in dependency order."""
    dialect = postgresql.dialect()
    statements = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=dialect)).strip() + ";")
        for index in sorted(table.indexes, key=lambda i: i.name):
            statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip() + ";")
    return "\n\n".join(statements) + "\n"
