from uuid import uuid4

import pytest

from app.models.academic import StudentSubject, Subject
from app.models.audit_log import AuditLog, AuditAction
from tests.utils import auth_headers

URL = "/api/v1/enrollments"

@pytest.fixture
def ctx(factory):
    career = factory.career()
    return {
        "admin": factory.admin(),
        "subject": factory.subject(career, max_quota=5),
        "other_subject": factory.subject(career, max_quota=5),
        "student": factory.student(career),
    }

def _payload(student, subject, **extra):
    return {"student_profile_id": str(student.student_profile.id), "subject_id": str(subject.id), **extra}

def test_create_does_not_touch_quota(client, db, ctx):
    response = client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=auth_headers(ctx["admin"]))

    assert response.status_code == 201
    assert response.json()["status"] == "enrolled"
    db.expire_all()
    assert db.get(Subject, ctx["subject"].id).available_quota == 5

def test_create_writes_audit_row(client, db, ctx):
    response = client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=auth_headers(ctx["admin"]))

    log = db.query(AuditLog).one()
    assert log.action == AuditAction.CREATE
    assert str(log.record_id) == response.json()["id"]

def test_create_duplicate_is_409(client, ctx):
    headers = auth_headers(ctx["admin"])
    client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers)

    response = client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers)

    assert response.status_code == 409

def test_create_with_unknown_subject_is_404(client, ctx):
    payload = {"student_profile_id": str(ctx["student"].student_profile.id), "subject_id": str(uuid4())}

    response = client.post(URL + "/", json=payload, headers=auth_headers(ctx["admin"]))

    assert response.status_code == 404

def test_create_rejects_out_of_range_grade(client, ctx):
    response = client.post(
        URL + "/", json=_payload(ctx["student"], ctx["subject"], grade=25), headers=auth_headers(ctx["admin"])
    )

    assert response.status_code == 422

def test_get_missing_enrollment_is_404(client, ctx):
    assert client.get(f"{URL}/{uuid4()}", headers=auth_headers(ctx["admin"])).status_code == 404

def test_list_enrollments(client, ctx):
    headers = auth_headers(ctx["admin"])
    client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers)
    client.post(URL + "/", json=_payload(ctx["student"], ctx["other_subject"]), headers=headers)

    body = client.get(URL + "/", headers=headers).json()

    assert body["total"] == 2
    assert len(body["items"]) == 2

def test_update_grade_and_status(client, ctx):
    headers = auth_headers(ctx["admin"])
    created = client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers).json()

    response = client.patch(f"{URL}/{created['id']}", json={"grade": 17.5, "status": "completed"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert float(response.json()["grade"]) == 17.5

def test_update_to_existing_pair_is_409(client, ctx):
    headers = auth_headers(ctx["admin"])
    client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers)
    second = client.post(URL + "/", json=_payload(ctx["student"], ctx["other_subject"]), headers=headers).json()

    response = client.patch(f"{URL}/{second['id']}", json={"subject_id": str(ctx["subject"].id)}, headers=headers)

    assert response.status_code == 409

def test_delete_returns_message_and_audits(client, db, ctx):
    headers = auth_headers(ctx["admin"])
    created = client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers).json()

    response = client.delete(f"{URL}/{created['id']}", headers=headers)

    assert response.status_code == 200
    assert "deleted successfully" in response.json()["message"]
    db.expire_all()
    assert db.query(StudentSubject).count() == 0
    actions = {log.action for log in db.query(AuditLog).all()}
    assert actions == {AuditAction.CREATE, AuditAction.DELETE}

def test_plain_crud_is_admin_only(client, ctx):
    response = client.post(
        URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=auth_headers(ctx["student"])
    )

    assert response.status_code == 403

def test_audit_log_endpoint(client, ctx):
    headers = auth_headers(ctx["admin"])
    client.post(URL + "/", json=_payload(ctx["student"], ctx["subject"]), headers=headers)

    body = client.get("/api/v1/audit-logs/", params={"action": "CREATE"}, headers=headers).json()

    assert body["total"] == 1
    assert body["items"][0]["table_name"] == "student_subjects"
