from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional

# --- Domain Schemas ---

class Student(BaseModel):
    """A registered student joined with their course enrollments."""
    id: str
    full_name: str
    matric_number: str
    image: str = ""
    session: str = ""
    semester: str = ""
    courses: List[str] = Field(default_factory=list)
    registration_date: Optional[datetime] = None


class CourseAttendance(BaseModel):
    """One verified exam attendance."""
    id: str
    matric_number: str
    course_code: str
    verification_date: datetime
    invigilator_name: str

# --- Request Schemas ---

class StudentCreate(BaseModel):
    """Schema for registering a student (input validation happens in the service)."""
    full_name: str = Field("", examples=["Jane Doe"])
    matric_number: str = Field("", examples=["CSC/2020/001"])
    image: str = Field("", description="Photo as a data URI or URL.")
    session: Optional[str] = Field(None, examples=["2024/2025"])
    semester: Optional[str] = Field(None, examples=["First Semester"])
    courses: List[str] = Field(default_factory=list, examples=[["CSC 301", "CSC 302"]])


class AttendanceCreate(BaseModel):
    """Schema for marking attendance."""
    matric_number: str = Field("", examples=["csc/2020/001"])
    course_code: str = Field("", examples=["CSC 301"])
    invigilator_name: str = Field("", examples=["Dr. Okafor"])

# --- Result Schemas ---

class RegistrationResult(BaseModel):
    student: Student
    created: bool
    added_courses: List[str]
    skipped_courses: List[str]


class CourseStats(BaseModel):
    course_code: str
    registered: int
    attended: int
    absent: int
    percentage: int


class StudentStats(BaseModel):
    matric_number: str
    enrolled: int
    attended: int
    percentage: int
    attended_courses: List[str]


class AttendanceDetail(BaseModel):
    student: Student
    attendance: CourseAttendance
    status: str = "present"


class RosterEntry(BaseModel):
    student: Student
    status: str  # "present" or "absent"
    attendance: Optional[CourseAttendance] = None


class Summary(BaseModel):
    total_students: int
    total_courses: int
    total_enrollments: int
    total_attendance: int

# --- Utility Schemas ---

class Message(BaseModel):
    """Generic message schema for sending simple status responses."""
    message: str
