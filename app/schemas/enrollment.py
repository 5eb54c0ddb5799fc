from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.models.academic import EnrollmentStatus
from app.schemas.academic import CareerMini, SubjectMini, SubjectResponse
from app.schemas.user import UserMiniResponse
import uuid

class EnrollmentCreate(BaseModel):
    student_profile_id: uuid.UUID
    subject_id: uuid.UUID
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    grade: Optional[Decimal] = Field(None, ge=0, le=20)

class EnrollmentUpdate(BaseModel):
    student_profile_id: Optional[uuid.UUID] = None
    subject_id: Optional[uuid.UUID] = None
    status: Optional[EnrollmentStatus] = None
    grade: Optional[Decimal] = Field(None, ge=0, le=20)

class EnrolledStudent(BaseModel):
    id: uuid.UUID
    current_cycle: int
    user: Optional[UserMiniResponse] = None
    career: Optional[CareerMini] = None

    model_config = {"from_attributes": True}

class EnrollmentResponse(BaseModel):
    id: uuid.UUID
    student_profile_id: uuid.UUID
    subject_id: uuid.UUID
    status: EnrollmentStatus
    grade: Optional[Decimal] = None
    enrolled_at: Optional[datetime] = None
    student_profile: Optional[EnrolledStudent] = None
    subject: Optional[SubjectMini] = None

    model_config = {"from_attributes": True}

class EnrollmentListResponse(BaseModel):
    items: List[EnrollmentResponse]
    total: int
    page: int
    size: int
    pages: int

class TransactionalEnrollmentRequest(BaseModel):
    student_profile_id: uuid.UUID
    subject_id: uuid.UUID

class QuotaInfo(BaseModel):
    previous_quota: int
    current_quota: int
    max_quota: int

class TransactionalEnrollmentResponse(BaseModel):
    enrollment: EnrollmentResponse
    updated_subject: SubjectResponse
    message: str
    quota_info: QuotaInfo
