import pytest

from app.errors import (
    MissingField, DuplicateEnrollment, StudentNotFound,
    MissingSelection, NotEnrolled, AlreadyVerified, StoreUnavailable,
)
from app.services.attendance_service import AttendanceService
from conftest import FIXED_NOW

PHOTO = "data:image/jpeg;base64,AAAA"


def register_a(service, courses=("CSC 301", "CSC 302"), matric="CSC/2020/001"):
    return service.register_student("Ada Obi", matric, PHOTO, list(courses))


# -----------------------------
# Registration
# -----------------------------

def test_register_new_student(service, store):
    result = register_a(service)

    assert result.created is True
    assert result.added_courses == ["CSC 301", "CSC 302"]
    assert len(service.students) == 1
    student = service.students[0]
    assert student.matric_number == "CSC/2020/001"
    assert student.courses == ["CSC 301", "CSC 302"]
    assert student.session == "2024/2025"
    assert student.semester == "First Semester"
    assert student.registration_date == FIXED_NOW
    assert len(store.enrollment_rows) == 2


def test_register_normalizes_matric_and_courses(service):
    result = service.register_student(" Ada Obi ", " csc/2020/001 ", PHOTO, ["CSC 301", " CSC 301", ""])
    assert result.student.matric_number == "CSC/2020/001"
    assert result.student.full_name == "Ada Obi"
    assert result.student.courses == ["CSC 301"]


def test_reregistration_adds_only_new_courses(service, store):
    register_a(service)
    result = register_a(service, courses=["CSC 301", "MTH 301"], matric="csc/2020/001")

    assert result.created is False
    assert result.skipped_courses == ["CSC 301"]
    assert result.added_courses == ["MTH 301"]
    assert sorted(result.student.courses) == ["CSC 301", "CSC 302", "MTH 301"]
    # still a single student, union persisted as enrollment rows
    assert len(service.students) == 1
    assert len(store.student_rows) == 1
    assert sorted(r["course_code"] for r in store.enrollment_rows) == ["CSC 301", "CSC 302", "MTH 301"]


def test_reregistration_with_nothing_new_is_rejected(service, store):
    register_a(service)
    with pytest.raises(DuplicateEnrollment) as exc:
        register_a(service, courses=["CSC 302", "CSC 301"])
    assert exc.value.courses == ["CSC 302", "CSC 301"]
    assert len(store.enrollment_rows) == 2


@pytest.mark.parametrize("kwargs,missing", [
    (dict(full_name="", matric_number="CSC/1", image=PHOTO, courses=["CSC 301"]), ["full_name"]),
    (dict(full_name="Ada", matric_number="  ", image=PHOTO, courses=["CSC 301"]), ["matric_number"]),
    (dict(full_name="Ada", matric_number="CSC/1", image="", courses=["CSC 301"]), ["image"]),
    (dict(full_name="Ada", matric_number="CSC/1", image=PHOTO, courses=[]), ["courses"]),
    (dict(full_name="", matric_number="", image="", courses=[]), ["full_name", "matric_number", "image", "courses"]),
])
def test_register_missing_fields(service, store, kwargs, missing):
    with pytest.raises(MissingField) as exc:
        service.register_student(**kwargs)
    assert exc.value.fields == missing
    assert store.student_rows == []
    assert store.enrollment_rows == []


def test_enrollment_failure_leaves_orphan_student(service, store):
    store.fail_enrollments = True
    with pytest.raises(StoreUnavailable):
        register_a(service)
    assert len(store.student_rows) == 1
    assert service.students[0].courses == []


def test_student_write_failure_aborts(service, store):
    store.fail_writes = True
    with pytest.raises(StoreUnavailable):
        register_a(service)
    assert service.students == []


def test_student_registered_by_another_writer_refreshes_snapshot(service, store):
    # written behind the service's back, so the snapshot is stale
    store.student_rows.append({"id": "99", "full_name": "Ada Obi", "matric_number": "CSC/2020/001",
                               "image": PHOTO, "session": "2024/2025", "semester": "First Semester"})
    store.enrollment_rows.append({"id": "100", "student_id": "99", "course_code": "CSC 301"})
    assert service.students == []

    with pytest.raises(DuplicateEnrollment):
        register_a(service, courses=["CSC 302"])
    assert [s.matric_number for s in service.students] == ["CSC/2020/001"]

    result = register_a(service, courses=["CSC 302"])
    assert result.created is False
    assert result.added_courses == ["CSC 302"]
    assert sorted(result.student.courses) == ["CSC 301", "CSC 302"]


def test_enrollment_rejected_by_store_refreshes_snapshot(service, store):
    register_a(service, courses=["CSC 301"])
    student_id = service.students[0].id
    store.enrollment_rows.append({"id": "99", "student_id": student_id, "course_code": "MTH 301"})

    with pytest.raises(DuplicateEnrollment) as exc:
        register_a(service, courses=["MTH 301"])
    assert "CSC/2020/001" in str(exc.value)
    assert f"Student {student_id} " not in str(exc.value)
    assert sorted(service.students[0].courses) == ["CSC 301", "MTH 301"]


# -----------------------------
# Verification
# -----------------------------

def test_mark_attendance_once(service, store):
    register_a(service)
    record = service.mark_attendance("CSC/2020/001", "CSC 301", "  Dr. Okafor ")

    assert record.matric_number == "CSC/2020/001"
    assert record.course_code == "CSC 301"
    assert record.invigilator_name == "Dr. Okafor"
    assert record.verification_date == FIXED_NOW
    assert len(service.attendance) == 1

    with pytest.raises(AlreadyVerified):
        service.mark_attendance("CSC/2020/001", "CSC 301", "Dr. Okafor")
    assert len(store.attendance_rows) == 1


def test_mark_attendance_lowercase_lookup(service):
    register_a(service)
    record = service.mark_attendance("csc/2020/001", "CSC 301", "Dr. Okafor")
    assert record.matric_number == "CSC/2020/001"
    assert service.is_verified("csc/2020/001", "CSC 301") is True
    assert service.is_verified("CSC/2020/001", "CSC 302") is False


def test_mark_attendance_unknown_student(service, store):
    with pytest.raises(StudentNotFound):
        service.mark_attendance("CSC/2020/404", "CSC 301", "Dr. Okafor")
    assert store.attendance_rows == []


@pytest.mark.parametrize("course,invigilator", [("", "Dr. Okafor"), ("CSC 301", "   "), ("", "")])
def test_mark_attendance_missing_selection(service, store, course, invigilator):
    register_a(service)
    with pytest.raises(MissingSelection):
        service.mark_attendance("CSC/2020/001", course, invigilator)
    assert store.attendance_rows == []


def test_mark_attendance_course_not_registered(service, store):
    register_a(service)
    with pytest.raises(NotEnrolled):
        service.mark_attendance("CSC/2020/001", "PHY 301", "Dr. Okafor")
    assert store.attendance_rows == []


def test_attendance_rejected_by_store_refreshes_snapshot(service, store):
    register_a(service)
    store.attendance_rows.append({"id": "99", "matric_number": "CSC/2020/001", "course_code": "CSC 301",
                                  "verification_date": FIXED_NOW.isoformat(), "invigilator_name": "Mrs. Uche"})

    with pytest.raises(AlreadyVerified):
        service.mark_attendance("CSC/2020/001", "CSC 301", "Dr. Okafor")
    assert service.is_verified("CSC/2020/001", "CSC 301") is True
    assert service.attendance[0].invigilator_name == "Mrs. Uche"


def test_attendance_write_failure(service, store):
    register_a(service)
    store.fail_writes = True
    with pytest.raises(StoreUnavailable):
        service.mark_attendance("CSC/2020/001", "CSC 301", "Dr. Okafor")
    assert service.attendance == []


# -----------------------------
# Loading
# -----------------------------

def test_failed_reload_keeps_previous_snapshot(service, store):
    register_a(service)
    service.mark_attendance("CSC/2020/001", "CSC 301", "Dr. Okafor")

    store.fail_reads = True
    assert service.reload_students() is False
    assert service.reload_attendance() is False
    assert len(service.students) == 1
    assert len(service.attendance) == 1


def test_load_when_store_is_down_starts_empty(store):
    store.fail_reads = True
    service = AttendanceService(store)
    service.load()
    assert service.students == []
    assert service.attendance == []
