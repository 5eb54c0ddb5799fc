from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID
from app.core.database import get_db
from app.dependencies import CommonQueryParams, get_current_active_user, get_current_admin_user
from app.models.user import User, UserStatus
from app.schemas.teacher import TeacherResponse, TeacherListResponse, TeacherUpdate
from app.services.teacher import teacher_service

router = APIRouter(prefix="/teachers", tags=["Teachers"])

@router.get("/", response_model=TeacherListResponse)
async def list_teachers(
    commons: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return await teacher_service.list_teachers(db, skip=commons.skip, limit=commons.limit)

@router.get("/queries/multiple-subjects", response_model=List[TeacherResponse])
async def get_teachers_with_multiple_subjects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Teachers assigned to more than one subject"""
    return await teacher_service.get_with_multiple_subjects(db)

@router.get("/queries/with-filters", response_model=List[TeacherResponse])
async def find_teachers_with_filters(
    speciality_id: Optional[UUID] = Query(None),
    career_id: Optional[UUID] = Query(None),
    has_subjects: Optional[bool] = Query(None, description="true: with assignments, false: without"),
    status: UserStatus = Query(UserStatus.ACTIVE, description="Used when exclude_inactive is false"),
    exclude_inactive: bool = Query(True, description="NOT status = inactive"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await teacher_service.find_with_filters(
        db,
        speciality_id=speciality_id,
        career_id=career_id,
        has_subjects=has_subjects,
        status=status,
        exclude_inactive=exclude_inactive
    )

@router.get("/{user_id}", response_model=TeacherResponse)
async def get_teacher(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return await teacher_service.get_teacher(db, user_id)

@router.patch("/{user_id}", response_model=TeacherResponse)
async def update_teacher(
    user_id: UUID,
    teacher_update: TeacherUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await teacher_service.update_teacher(db, user_id, teacher_update, updated_by=current_user.id)

@router.delete("/{user_id}")
async def delete_teacher(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await teacher_service.delete_teacher(db, user_id)
