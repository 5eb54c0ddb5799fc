from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.dependencies import get_current_active_user, require_roles, CommonQueryParams
from app.models.academic import Cycle, Subject
from app.models.user import UserRole, UserStatus
from app.repositories.cycle import CycleRepository
from app.repositories.subject import SubjectRepository
from app.routers.generic_crud import CRUDBase
from app.schemas.user import UserAdminUpdate
from app.services.cycle import CycleService
from app.services.student import StudentService
from app.services.user import UserService

def _user(role=UserRole.STUDENT, status=UserStatus.ACTIVE):
    return MagicMock(role=role, status=status)

# ==========================================
# 1. GUARDS
# ==========================================
def test_require_roles_allows_listed_role():
    checker = require_roles(UserRole.ADMIN, UserRole.TEACHER)
    user = _user(UserRole.TEACHER)

    assert checker(current_user=user) is user

def test_require_roles_rejects_other_roles():
    checker = require_roles(UserRole.ADMIN)

    with pytest.raises(HTTPException) as exc_info:
        checker(current_user=_user(UserRole.STUDENT))

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "User does not have the required role"

def test_require_roles_without_roles_allows_anyone():
    user = _user(UserRole.STUDENT)

    assert require_roles()(current_user=user) is user

@pytest.mark.parametrize("status", [UserStatus.INACTIVE, UserStatus.SUSPENDED])
def test_get_current_active_user_rejects_non_active(status):
    with pytest.raises(HTTPException) as exc_info:
        get_current_active_user(current_user=_user(status=status))

    assert exc_info.value.status_code == 400

def test_common_query_params_page():
    assert CommonQueryParams(skip=20, limit=10).page == 3

# ==========================================
# 2. REPOSITORY HOOKS
# ==========================================
def test_subject_prepare_create_defaults_available_quota(mock_db_session):
    data = SubjectRepository().prepare_create(mock_db_session, {"name": "Algebra", "max_quota": 12})

    assert data["available_quota"] == 12

def test_subject_prepare_update_shifts_available_by_delta(mock_db_session):
    subject = Subject(max_quota=30, available_quota=10)

    data = SubjectRepository().prepare_update(mock_db_session, subject, {"max_quota": 25})

    assert data["available_quota"] == 5
    mock_db_session.refresh.assert_called_once_with(subject, with_for_update=True)

def test_subject_prepare_update_rejects_oversubscription(mock_db_session):
    subject = Subject(max_quota=30, available_quota=10)

    with pytest.raises(HTTPException) as exc_info:
        SubjectRepository().prepare_update(mock_db_session, subject, {"max_quota": 19})

    assert exc_info.value.status_code == 409

def test_subject_prepare_update_ignores_direct_available_quota(mock_db_session):
    subject = Subject(max_quota=30, available_quota=10)

    data = SubjectRepository().prepare_update(mock_db_session, subject, {"available_quota": 30, "name": "X"})

    assert data == {"name": "X"}
    mock_db_session.refresh.assert_not_called()

def test_cycle_prepare_create_deactivates_others_only_when_active(mock_db_session):
    repo = CycleRepository()

    repo.prepare_create(mock_db_session, {"is_active": False})
    mock_db_session.query.return_value.update.assert_not_called()

    repo.prepare_create(mock_db_session, {"is_active": True})
    mock_db_session.query.return_value.update.assert_called_once()

def test_cycle_prepare_update_checks_merged_dates(mock_db_session):
    cycle = Cycle(start_date=date(2025, 3, 1), end_date=date(2025, 7, 31))

    with pytest.raises(HTTPException) as exc_info:
        CycleRepository().prepare_update(mock_db_session, cycle, {"start_date": date(2025, 8, 1)})

    assert exc_info.value.status_code == 400

def test_crud_update_rolls_back_when_hook_rejects(mock_db_session, mocker):
    crud = CRUDBase(Subject)
    mocker.patch.object(crud, "prepare_update", side_effect=HTTPException(status_code=409, detail="no"))

    with pytest.raises(HTTPException):
        crud.update(mock_db_session, db_obj=Subject(name="A"), obj_in={"name": "B"})

    mock_db_session.rollback.assert_called_once()
    mock_db_session.commit.assert_not_called()

# ==========================================
# 3. SERVICES
# ==========================================
@pytest.mark.asyncio
async def test_active_cycle_missing_is_404():
    service = CycleService()
    service.repository = MagicMock()
    service.repository.get_active.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await service.get_active_cycle(MagicMock())

    assert exc_info.value.status_code == 404

@pytest.mark.asyncio
async def test_get_student_missing_is_404(sample_user_id):
    service = StudentService()
    service.repository = MagicMock()
    service.repository.get.return_value = None

    with pytest.raises(HTTPException) as exc_info:
        await service.get_student(MagicMock(), sample_user_id)

    assert exc_info.value.status_code == 404
    assert str(sample_user_id) in exc_info.value.detail

@pytest.mark.asyncio
async def test_list_students_pagination_math():
    service = StudentService()
    service.repository = MagicMock()
    service.repository.list.return_value = (["a", "b"], 21)

    result = await service.list_students(MagicMock(), skip=10, limit=10)

    assert (result["page"], result["pages"], result["total"]) == (2, 3, 21)

@pytest.mark.asyncio
async def test_enrollment_report_rolls_back_on_database_error():
    service = StudentService()
    service.repository = MagicMock()
    service.repository.enrollment_report.side_effect = SQLAlchemyError("relation does not exist")
    db = MagicMock()

    with pytest.raises(HTTPException) as exc_info:
        await service.enrollment_report(db)

    assert exc_info.value.status_code == 500
    db.rollback.assert_called_once()

@pytest.mark.asyncio
async def test_update_user_maps_integrity_error_to_409(mocker, sample_user_id):
    service = UserService()
    mocker.patch.object(service, "get", return_value=MagicMock())
    mocker.patch.object(
        service.repository, "update",
        side_effect=IntegrityError("UPDATE users", {}, Exception("NOT NULL constraint failed"))
    )
    db = MagicMock()

    with pytest.raises(HTTPException) as exc_info:
        await service.update_user(db, sample_user_id, UserAdminUpdate(first_name="Ada"))

    assert exc_info.value.status_code == 409
    db.rollback.assert_called_once()

@pytest.mark.asyncio
async def test_update_user_drops_explicit_nulls(mocker, sample_user_id):
    service = UserService()
    user = MagicMock()
    mocker.patch.object(service, "get", return_value=user)
    update = mocker.patch.object(service.repository, "update", return_value=user)

    await service.update_user(MagicMock(), sample_user_id, UserAdminUpdate(first_name=None, status=None))

    assert update.call_args.args[2] == {"updated_by": None}
