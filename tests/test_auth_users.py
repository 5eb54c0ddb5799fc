from app.core.security import create_refresh_token
from app.models.profile import StudentProfile, TeacherProfile
from app.models.user import User, UserRole, UserStatus
from tests.utils import PASSWORD, auth_headers

API = "/api/v1"

# ==========================================
# 1. AUTH
# ==========================================
def test_login_json_returns_tokens(client, factory):
    user = factory.admin()

    response = client.post(f"{API}/auth/login-json", json={"email": user.email, "password": PASSWORD})

    body = response.json()
    assert response.status_code == 200
    assert body["token_type"] == "bearer"
    assert body["access_token"] and body["refresh_token"]
    assert body["is_first_login"] is True

def test_login_form(client, factory):
    user = factory.admin()

    response = client.post(f"{API}/auth/login", data={"username": user.email, "password": PASSWORD})

    assert response.status_code == 200

def test_login_wrong_password(client, factory):
    user = factory.admin()

    response = client.post(f"{API}/auth/login-json", json={"email": user.email, "password": "Wrong1234"})

    assert response.status_code == 401

def test_login_inactive_account(client, db, factory):
    user = factory.admin(status=UserStatus.INACTIVE)

    response = client.post(f"{API}/auth/login-json", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 401
    assert response.json()["detail"] == "Account is not active"

    db.expire_all()
    assert db.get(User, user.id).last_login is None

def test_login_records_last_login(client, db, factory):
    user = factory.admin()

    client.post(f"{API}/auth/login-json", json={"email": user.email, "password": PASSWORD})

    db.expire_all()
    assert db.get(User, user.id).last_login is not None

def test_refresh_issues_access_token(client, factory):
    user = factory.admin()

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": create_refresh_token(user.email)})

    assert response.status_code == 200
    token = response.json()["access_token"]
    me = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == user.email

def test_refresh_token_cannot_be_used_as_access_token(client, factory):
    user = factory.admin()

    response = client.get(
        f"{API}/users/me", headers={"Authorization": f"Bearer {create_refresh_token(user.email)}"}
    )

    assert response.status_code == 401

def test_refresh_rejects_access_token(client, factory):
    user = factory.admin()
    access = auth_headers(user)["Authorization"].split()[1]

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": access})

    assert response.status_code == 401

# ==========================================
# 2. USERS
# ==========================================
def _new_user(role, **extra):
    return {
        "email": f"new.{role}@example.com",
        "password": "Passw0rdX",
        "first_name": "New",
        "last_name": role.title(),
        "role": role,
        **extra,
    }

def test_create_student_creates_profile(client, db, factory):
    admin = factory.admin()
    career = factory.career()

    response = client.post(
        f"{API}/users/", json=_new_user("student", career_id=str(career.id), current_cycle=2),
        headers=auth_headers(admin)
    )

    assert response.status_code == 201
    profile = db.query(StudentProfile).join(User).filter(User.email == "new.student@example.com").one()
    assert profile.career_id == career.id
    assert profile.current_cycle == 2

def test_create_teacher_creates_profile(client, db, factory):
    admin = factory.admin()

    response = client.post(f"{API}/users/", json=_new_user("teacher"), headers=auth_headers(admin))

    assert response.status_code == 201
    assert db.query(TeacherProfile).count() == 1

def test_create_student_requires_career(client, factory):
    admin = factory.admin()

    response = client.post(f"{API}/users/", json=_new_user("student"), headers=auth_headers(admin))

    assert response.status_code == 422

def test_create_user_weak_password(client, factory):
    admin = factory.admin()

    response = client.post(
        f"{API}/users/", json=_new_user("teacher", password="alllowercase1"), headers=auth_headers(admin)
    )

    assert response.status_code == 422

def test_create_user_duplicate_email(client, factory):
    admin = factory.admin()

    response = client.post(
        f"{API}/users/", json=_new_user("teacher", email=admin.email), headers=auth_headers(admin)
    )

    assert response.status_code == 400

def test_users_are_admin_only(client, factory):
    teacher = factory.teacher()

    assert client.get(f"{API}/users/", headers=auth_headers(teacher)).status_code == 403

def test_list_users_filters_by_role(client, factory):
    admin = factory.admin()
    career = factory.career()
    factory.student(career)
    factory.student(career)
    factory.teacher()

    response = client.get(f"{API}/users/", params={"role": "student"}, headers=auth_headers(admin))

    body = response.json()
    assert body["total"] == 2
    assert {u["role"] for u in body["users"]} == {"student"}

def test_update_me(client, factory):
    user = factory.teacher()

    response = client.put(f"{API}/users/me", json={"phone": "+51 999 888 777"}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["phone"] == "+51 999 888 777"

def test_update_me_ignores_null_fields(client, factory):
    user = factory.teacher(first_name="Grace")

    response = client.put(f"{API}/users/me", json={"first_name": None}, headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["first_name"] == "Grace"

def test_admin_update_ignores_null_status(client, factory):
    admin = factory.admin()
    teacher = factory.teacher()

    response = client.put(f"{API}/users/{teacher.id}", json={"status": None}, headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["status"] == "active"

def test_delete_user_marks_inactive(client, db, factory):
    admin = factory.admin()
    teacher = factory.teacher()

    response = client.delete(f"{API}/users/{teacher.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    db.expire_all()
    assert db.get(User, teacher.id).status == UserStatus.INACTIVE

def test_admin_cannot_delete_self(client, factory):
    admin = factory.admin()

    response = client.delete(f"{API}/users/{admin.id}", headers=auth_headers(admin))

    assert response.status_code == 400

def test_role_enum_values():
    assert [r.value for r in UserRole] == ["admin", "teacher", "student"]
