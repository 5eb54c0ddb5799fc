from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.dependencies import get_current_active_user, get_current_admin_user
from app.models.academic import Subject
from app.repositories.subject import subject_repository
from app.routers.generator import create_crud_router
from app.schemas.academic import SubjectCreate, SubjectUpdate, SubjectResponse

base_router = create_crud_router(
    model=Subject,
    db_dependency=get_db,
    auth_dependency=get_current_active_user,
    write_dependency=get_current_admin_user,
    crud=subject_repository,
    schemas={"response": SubjectResponse, "create": SubjectCreate, "update": SubjectUpdate},
    prefix=""
)

router = APIRouter(prefix="/subjects", tags=["Subjects"])

# Custom endpoints go first so they are matched before /{item_id}
@router.get("/queries/without-quota", response_model=List[SubjectResponse])
async def get_subjects_without_quota(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Subjects with no seats left"""
    return subject_repository.get_without_quota(db)

router.include_router(base_router)
