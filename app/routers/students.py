from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID
from app.core.database import get_db
from app.dependencies import CommonQueryParams, get_current_admin_user, get_current_teacher_or_admin
from app.models.user import User, UserStatus
from app.schemas.student import (
    StudentResponse, StudentListResponse, StudentUpdate,
    StudentCycleEnrollmentsResponse, EnrollmentReportRow
)
from app.services.student import student_service

router = APIRouter(prefix="/students", tags=["Students"])

@router.get("/", response_model=StudentListResponse)
async def list_students(
    commons: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_teacher_or_admin)
):
    return await student_service.list_students(db, skip=commons.skip, limit=commons.limit)

@router.get("/queries/active-with-career", response_model=List[StudentResponse])
async def get_active_students_with_career(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_teacher_or_admin)
):
    """Active students with their career, ordered by name"""
    return await student_service.get_active_with_career(db)

@router.get("/queries/with-filters", response_model=List[StudentResponse])
async def find_students_with_filters(
    status: UserStatus = Query(UserStatus.ACTIVE, description="User status"),
    career_id: Optional[UUID] = Query(None, description="Career of the student profile"),
    cycle_id: Optional[UUID] = Query(None, description="Enrolled in at least one subject of this cycle"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_teacher_or_admin)
):
    """status AND career AND cycle"""
    return await student_service.find_with_filters(db, status=status, career_id=career_id, cycle_id=cycle_id)

@router.get("/reports/enrollment-report", response_model=List[EnrollmentReportRow])
async def get_enrollment_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Active students with career and number of enrolled subjects (native SQL)"""
    return await student_service.enrollment_report(db)

@router.get("/{user_id}", response_model=StudentResponse)
async def get_student(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_teacher_or_admin)
):
    return await student_service.get_student(db, user_id)

@router.get("/{user_id}/enrollments/{cycle_id}", response_model=StudentCycleEnrollmentsResponse)
async def get_student_enrollments_by_cycle(
    user_id: UUID,
    cycle_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_teacher_or_admin)
):
    """Enrollments of a student in subjects of the given cycle"""
    return await student_service.get_enrollments_by_cycle(db, user_id, cycle_id)

@router.patch("/{user_id}", response_model=StudentResponse)
async def update_student(
    user_id: UUID,
    student_update: StudentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await student_service.update_student(db, user_id, student_update, updated_by=current_user.id)

@router.delete("/{user_id}")
async def delete_student(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await student_service.delete_student(db, user_id)
