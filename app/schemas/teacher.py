from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from app.models.user import UserStatus
from app.schemas.academic import CareerMini, SpecialityMini, SubjectMini
from app.schemas.user import UserResponse
import uuid

class TeacherAssignmentItem(BaseModel):
    id: uuid.UUID
    subject_id: uuid.UUID
    subject: Optional[SubjectMini] = None

    model_config = {"from_attributes": True}

class TeacherProfileResponse(BaseModel):
    id: uuid.UUID
    speciality_id: Optional[uuid.UUID] = None
    career_id: Optional[uuid.UUID] = None
    speciality: Optional[SpecialityMini] = None
    career: Optional[CareerMini] = None
    subjects: List[TeacherAssignmentItem] = []

    model_config = {"from_attributes": True}

class TeacherResponse(UserResponse):
    teacher_profile: Optional[TeacherProfileResponse] = None

class TeacherListResponse(BaseModel):
    items: List[TeacherResponse]
    total: int
    page: int
    size: int
    pages: int

class TeacherUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    status: Optional[UserStatus] = None
    speciality_id: Optional[uuid.UUID] = None
    career_id: Optional[uuid.UUID] = None
