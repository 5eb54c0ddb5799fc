from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from uuid import UUID
from app.core.database import get_db
from app.dependencies import CommonQueryParams, get_current_admin_user, get_current_student_or_admin
from app.models.user import User, UserRole
from app.schemas.enrollment import (
    EnrollmentCreate, EnrollmentUpdate, EnrollmentResponse, EnrollmentListResponse,
    TransactionalEnrollmentRequest, TransactionalEnrollmentResponse
)
from app.services.enrollment import enrollment_service

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])

@router.post(
    "/transactional",
    response_model=TransactionalEnrollmentResponse,
    status_code=status.HTTP_201_CREATED
)
def enroll_with_transaction(
    request: TransactionalEnrollmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student_or_admin)
):
    """
    Enroll a student in a subject and take one seat, atomically.

    Admins may enroll any student; students only themselves.
    """
    if current_user.role == UserRole.STUDENT:
        profile = current_user.student_profile
        if profile is None or profile.id != request.student_profile_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Students can only enroll themselves"
            )
    return enrollment_service.enroll_student_with_transaction(
        db, request.student_profile_id, request.subject_id, current_user_id=current_user.id
    )

@router.post("/", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    enrollment_in: EnrollmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await enrollment_service.create_enrollment(db, enrollment_in, current_user_id=current_user.id)

@router.get("/", response_model=EnrollmentListResponse)
async def list_enrollments(
    commons: CommonQueryParams = Depends(),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await enrollment_service.list_enrollments(db, skip=commons.skip, limit=commons.limit)

@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await enrollment_service.get_enrollment(db, enrollment_id)

@router.patch("/{enrollment_id}", response_model=EnrollmentResponse)
async def update_enrollment(
    enrollment_id: UUID,
    enrollment_in: EnrollmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await enrollment_service.update_enrollment(db, enrollment_id, enrollment_in, current_user_id=current_user.id)

@router.delete("/{enrollment_id}")
async def delete_enrollment(
    enrollment_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    return await enrollment_service.delete_enrollment(db, enrollment_id, current_user_id=current_user.id)
