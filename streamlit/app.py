import sys
from pathlib import Path

import streamlit as st

# -----------------------------
# 1. Path & Environment Setup
# -----------------------------
# Add project root to sys.path so we can import 'app'
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from app.config import COURSE_CATALOG, DEFAULT_SESSION, DEFAULT_SEMESTER  # noqa: E402
from app.errors import AttendanceError  # noqa: E402
from app.services import engine  # noqa: E402
from app.services.attendance_service import AttendanceService  # noqa: E402
from app.utils.image_utils import photo_to_data_uri  # noqa: E402
from app.utils.logger import setup_logging  # noqa: E402
from app.utils.supabase_utils import RecordStore  # noqa: E402

SEMESTERS = ["First Semester", "Second Semester"]


@st.cache_resource
def get_service() -> AttendanceService:
    setup_logging()
    service = AttendanceService(RecordStore.from_env())
    service.load()
    return service


def course_label(code: str) -> str:
    title = COURSE_CATALOG.get(code)
    return f"{code} - {title}" if title else code


# -----------------------------
# 2. Views
# -----------------------------

def register_tab(service: AttendanceService):
    st.header("Student Registration")
    with st.form("register", clear_on_submit=True):
        full_name = st.text_input("Full Name", placeholder="Enter student's full name")
        matric_number = st.text_input("Matric Number", placeholder="e.g., CSC/2020/001")
        c1, c2 = st.columns(2)
        session = c1.text_input("Session", value=DEFAULT_SESSION)
        semester = c2.selectbox("Semester", SEMESTERS, index=SEMESTERS.index(DEFAULT_SEMESTER) if DEFAULT_SEMESTER in SEMESTERS else 0)
        p1, p2 = st.columns(2)
        capture = p1.camera_input("Capture Photo")
        upload = p2.file_uploader("Or Upload Photo", type=["jpg", "jpeg", "png"])
        courses = st.multiselect("Courses", list(COURSE_CATALOG), format_func=course_label)
        submitted = st.form_submit_button("Register Student", type="primary")

    if not submitted:
        return
    try:
        image = photo_to_data_uri(capture, upload)
        result = service.register_student(full_name, matric_number, image, courses, session, semester)
    except (AttendanceError, ValueError) as e:
        st.error(str(e))
        return

    if result.created:
        st.success("Student registered successfully!")
    else:
        st.success(f"Student courses updated: added {', '.join(result.added_courses)}")
        if result.skipped_courses:
            st.info(f"Already registered for: {', '.join(result.skipped_courses)}")


def verify_tab(service: AttendanceService):
    st.header("Exam Verification")
    matric_number = st.text_input("Enter Matric Number", placeholder="e.g., CSC/2020/001").strip().upper()
    if not matric_number:
        return

    student = engine.find_student(service.students, matric_number)
    if student is None:
        st.error("Student not found. Please check the matric number.")
        return

    col1, col2 = st.columns([1, 2])
    with col1:
        if student.image:
            st.image(student.image, caption=student.full_name)
    with col2:
        st.subheader(student.full_name)
        st.caption(f"{student.matric_number} | {student.session} - {student.semester}")
        for code in student.courses:
            done = engine.is_already_verified(service.attendance, student.matric_number, code)
            st.write(f"{'✅' if done else '⬜'} {course_label(code)}")

        course = st.selectbox("Course", [""] + student.courses, format_func=lambda c: course_label(c) if c else "Select a course")
        invigilator = st.text_input("Invigilator Name")
        if st.button("Mark Attendance", type="primary"):
            try:
                service.mark_attendance(student.matric_number, course, invigilator)
            except AttendanceError as e:
                st.error(str(e))
            else:
                st.success("Student attendance marked successfully!")
                st.balloons()


def reports_tab(service: AttendanceService):
    st.header("Attendance Reports")
    courses = engine.list_courses(service.students)
    selected = st.selectbox("Course", [""] + courses, format_func=lambda c: c or "All Courses")

    for stats in engine.all_course_stats(service.students, service.attendance, selected or None):
        st.write(f"**{course_label(stats.course_code)}**: {stats.attended}/{stats.registered} attended ({stats.percentage}%)")
        st.progress(min(stats.percentage, 100) / 100)

    if not selected:
        summary = engine.overall_summary(service.students, service.attendance)
        c1, c2, c3 = st.columns(3)
        c1.metric("Students", summary.total_students)
        c2.metric("Attendance Records", summary.total_attendance)
        c3.metric("Course Registrations", summary.total_enrollments)
        return

    roster = engine.course_roster(service.students, service.attendance, selected)
    st.dataframe([
        {
            "Full Name": entry.student.full_name,
            "Matric Number": entry.student.matric_number,
            "Status": entry.status,
            "Verification Date": engine.format_timestamp(entry.attendance.verification_date) if entry.attendance else "",
            "Invigilator": entry.attendance.invigilator_name if entry.attendance else "",
        }
        for entry in roster
    ], use_container_width=True)

    details = engine.course_attendance_details(service.students, service.attendance, selected)
    st.download_button(
        "📥 Export CSV",
        engine.export_course_csv(details),
        engine.export_filename(selected),
        mime="text/csv",
    )


def students_tab(service: AttendanceService):
    st.header("Registered Students")
    c1, c2, c3 = st.columns(3)
    session = c1.selectbox("Session", [""] + engine.list_sessions(service.students), format_func=lambda s: s or "All Sessions")
    semester = c2.selectbox("Semester", [""] + engine.list_semesters(service.students), format_func=lambda s: s or "All Semesters")
    query = c3.text_input("Search", placeholder="Name or matric number")

    students = engine.filter_students(service.students, session or None, semester or None, query)
    st.caption(f"Showing {len(students)} student{'s' if len(students) != 1 else ''}")
    for student in students:
        stats = engine.student_stats(student, service.attendance)
        with st.expander(f"{student.full_name} ({student.matric_number}) - {stats.percentage}%"):
            if student.image:
                st.image(student.image, width=120)
            st.write(f"{student.session} - {student.semester}")
            for code in student.courses:
                st.write(f"{'✅' if code in stats.attended_courses else '⬜'} {course_label(code)}")


# -----------------------------
# 3. Streamlit UI
# -----------------------------
def main():
    st.set_page_config(page_title="Exam Attendance", page_icon="📝", layout="wide")
    st.title("📝 Exam Attendance System")

    try:
        service = get_service()
    except AttendanceError as e:
        st.error(f"⚠️ Database Connection Error: {e}")
        st.stop()

    if st.sidebar.button("🔄 Reload Data"):
        service.load()

    tab1, tab2, tab3, tab4 = st.tabs(["Register", "Verify", "Reports", "Students"])
    with tab1:
        register_tab(service)
    with tab2:
        verify_tab(service)
    with tab3:
        reports_tab(service)
    with tab4:
        students_tab(service)


if __name__ == "__main__":
    main()
