from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.models.academic import EnrollmentStatus
from app.models.user import UserStatus
from app.schemas.academic import CareerMini, SubjectMini
from app.schemas.user import UserResponse
import uuid

class StudentEnrollmentItem(BaseModel):
    id: uuid.UUID
    subject_id: uuid.UUID
    status: EnrollmentStatus
    grade: Optional[Decimal] = None
    enrolled_at: Optional[datetime] = None
    subject: Optional[SubjectMini] = None

    model_config = {"from_attributes": True}

class StudentProfileResponse(BaseModel):
    id: uuid.UUID
    career_id: uuid.UUID
    current_cycle: int
    career: Optional[CareerMini] = None
    enrollments: List[StudentEnrollmentItem] = []

    model_config = {"from_attributes": True}

class StudentResponse(UserResponse):
    student_profile: Optional[StudentProfileResponse] = None

class StudentListResponse(BaseModel):
    items: List[StudentResponse]
    total: int
    page: int
    size: int
    pages: int

class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    status: Optional[UserStatus] = None
    career_id: Optional[uuid.UUID] = None
    current_cycle: Optional[int] = Field(None, ge=1)

class StudentSummary(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    career: Optional[CareerMini] = None

class StudentCycleEnrollmentsResponse(BaseModel):
    student: StudentSummary
    cycle_id: uuid.UUID
    enrollments: List[StudentEnrollmentItem]

class EnrollmentReportRow(BaseModel):
    student_id: uuid.UUID
    student_name: str
    student_email: str
    career_name: str
    total_enrolled_subjects: int
