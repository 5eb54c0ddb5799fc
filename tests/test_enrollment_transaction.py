import threading
from uuid import uuid4

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from app.models.academic import StudentSubject, Subject
from app.models.audit_log import AuditLog, AuditAction
from app.models.user import UserStatus
from app.services.enrollment import (
    enrollment_service, is_serialization_failure,
    TRANSACTION_CONFLICT_DETAIL, ENROLLED_MESSAGE
)
from tests.utils import auth_headers

URL = "/api/v1/enrollments/transactional"

@pytest.fixture
def setup(factory):
    career = factory.career()
    subject = factory.subject(career, max_quota=2, name="Algorithms")
    student = factory.student(career)
    admin = factory.admin()
    return {"career": career, "subject": subject, "student": student, "admin": admin}

def _payload(student, subject):
    return {"student_profile_id": str(student.student_profile.id), "subject_id": str(subject.id)}

def _enrollment_count(db):
    return db.query(StudentSubject).count()

# ==========================================
# 1. HAPPY PATH
# ==========================================
def test_enroll_success_decrements_quota(client, db, setup):
    subject, student, admin = setup["subject"], setup["student"], setup["admin"]

    response = client.post(URL, json=_payload(student, subject), headers=auth_headers(admin))

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == ENROLLED_MESSAGE
    assert body["quota_info"] == {"previous_quota": 2, "current_quota": 1, "max_quota": 2}
    assert body["updated_subject"]["available_quota"] == 1
    assert body["enrollment"]["status"] == "enrolled"
    assert body["enrollment"]["student_profile"]["user"]["email"] == student.email

    db.expire_all()
    assert db.get(Subject, subject.id).available_quota == 1
    assert _enrollment_count(db) == 1

def test_enroll_writes_audit_row(client, db, setup):
    subject, student, admin = setup["subject"], setup["student"], setup["admin"]

    client.post(URL, json=_payload(student, subject), headers=auth_headers(admin))

    logs = db.query(AuditLog).filter(AuditLog.action == AuditAction.ENROLL).all()
    assert len(logs) == 1
    assert logs[0].table_name == "student_subjects"
    assert logs[0].user_id == admin.id
    assert logs[0].old_values == {"available_quota": 2}
    assert logs[0].new_values["available_quota"] == 1

def test_student_can_enroll_self(client, setup):
    subject, student = setup["subject"], setup["student"]

    response = client.post(URL, json=_payload(student, subject), headers=auth_headers(student))

    assert response.status_code == 201

# ==========================================
# 2. REJECTIONS
# ==========================================
def test_student_cannot_enroll_someone_else(client, factory, setup):
    other = factory.student(setup["career"])

    response = client.post(URL, json=_payload(other, setup["subject"]), headers=auth_headers(setup["student"]))

    assert response.status_code == 403

def test_teacher_cannot_use_transactional_enrollment(client, factory, setup):
    teacher = factory.teacher()

    response = client.post(URL, json=_payload(setup["student"], setup["subject"]), headers=auth_headers(teacher))

    assert response.status_code == 403
    assert response.json()["detail"] == "User does not have the required role"

def test_unknown_student_profile_is_404(client, setup):
    payload = {"student_profile_id": str(uuid4()), "subject_id": str(setup["subject"].id)}

    response = client.post(URL, json=payload, headers=auth_headers(setup["admin"]))

    assert response.status_code == 404

def test_unknown_subject_is_404(client, setup):
    payload = {"student_profile_id": str(setup["student"].student_profile.id), "subject_id": str(uuid4())}

    response = client.post(URL, json=payload, headers=auth_headers(setup["admin"]))

    assert response.status_code == 404

def test_inactive_student_is_409(client, db, factory, setup):
    suspended = factory.student(setup["career"], status=UserStatus.SUSPENDED)

    response = client.post(URL, json=_payload(suspended, setup["subject"]), headers=auth_headers(setup["admin"]))

    assert response.status_code == 409
    assert "suspended" in response.json()["detail"]
    assert _enrollment_count(db) == 0

def test_no_quota_is_409(client, db, factory, setup):
    full = factory.subject(setup["career"], max_quota=3, available_quota=0, name="Full")

    response = client.post(URL, json=_payload(setup["student"], full), headers=auth_headers(setup["admin"]))

    assert response.status_code == 409
    assert "0/3" in response.json()["detail"]
    assert _enrollment_count(db) == 0

def test_duplicate_enrollment_is_409_and_keeps_quota(client, db, setup):
    subject, student, admin = setup["subject"], setup["student"], setup["admin"]
    client.post(URL, json=_payload(student, subject), headers=auth_headers(admin))

    response = client.post(URL, json=_payload(student, subject), headers=auth_headers(admin))

    assert response.status_code == 409
    assert response.json()["detail"] == "Student is already enrolled in this subject"
    db.expire_all()
    assert db.get(Subject, subject.id).available_quota == 1
    assert _enrollment_count(db) == 1

# ==========================================
# 3. ROLLBACK AND ERROR MAPPING
# ==========================================
def test_failure_after_insert_rolls_everything_back(db, setup, mocker):
    subject, student = setup["subject"], setup["student"]
    mocker.patch(
        "app.services.enrollment.audit_service.log",
        side_effect=SQLAlchemyError("audit table unavailable")
    )

    with pytest.raises(HTTPException) as exc_info:
        enrollment_service.enroll_student_with_transaction(db, student.student_profile.id, subject.id)

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail.startswith("Error enrolling student:")
    db.expire_all()
    assert _enrollment_count(db) == 0
    assert db.get(Subject, subject.id).available_quota == 2

def test_lock_timeout_maps_to_transaction_conflict(db, setup, mocker):
    mocker.patch.object(
        enrollment_service, "_enroll",
        side_effect=OperationalError("UPDATE subjects", {}, Exception("database is locked"))
    )

    with pytest.raises(HTTPException) as exc_info:
        enrollment_service.enroll_student_with_transaction(
            db, setup["student"].student_profile.id, setup["subject"].id
        )

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == TRANSACTION_CONFLICT_DETAIL

def test_concurrent_duplicate_pair_reports_already_enrolled(db, setup, mocker):
    mocker.patch.object(
        enrollment_service, "_enroll",
        side_effect=IntegrityError("INSERT INTO student_subjects", {}, Exception("UNIQUE constraint failed"))
    )

    with pytest.raises(HTTPException) as exc_info:
        enrollment_service.enroll_student_with_transaction(
            db, setup["student"].student_profile.id, setup["subject"].id
        )

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == "Student is already enrolled in this subject"

class _PgSerializationError(Exception):
    pgcode = "40001"

def test_is_serialization_failure_detects_pgcode_and_messages():
    assert is_serialization_failure(OperationalError("stmt", {}, _PgSerializationError("x")))
    assert is_serialization_failure(
        OperationalError("stmt", {}, Exception("could not serialize access due to concurrent update"))
    )
    assert not is_serialization_failure(OperationalError("stmt", {}, Exception("disk I/O error")))

# ==========================================
# 4. CONCURRENCY
# ==========================================
def test_concurrent_enrollments_never_oversubscribe(session_factory, factory, setup):
    """Several students race for the last seat: exactly one wins."""
    last_seat = factory.subject(setup["career"], max_quota=1, name="Last seat")
    students = [factory.student(setup["career"]) for _ in range(5)]
    profile_ids = [s.student_profile.id for s in students]
    barrier = threading.Barrier(len(profile_ids))
    results = []
    lock = threading.Lock()

    def worker(profile_id):
        session = session_factory()
        try:
            barrier.wait()
            enrollment_service.enroll_student_with_transaction(session, profile_id, last_seat.id)
            outcome = "ok"
        except HTTPException as e:
            outcome = e.status_code
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(pid,)) for pid in profile_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert results.count("ok") == 1
    assert sorted(r for r in results if r != "ok") == [409] * 4

    check = session_factory()
    try:
        assert check.get(Subject, last_seat.id).available_quota == 0
        assert check.query(StudentSubject).filter(StudentSubject.subject_id == last_seat.id).count() == 1
    finally:
        check.close()
