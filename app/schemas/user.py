from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, date
from app.models.user import UserRole, UserStatus
import uuid

# Base schemas
class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=r'^\+?[0-9\s\-\(\)]{7,20}$')
    date_of_birth: Optional[date] = None
    address: Optional[str] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.STUDENT

    # profile data, depending on role
    career_id: Optional[uuid.UUID] = None
    current_cycle: int = Field(1, ge=1)
    speciality_id: Optional[uuid.UUID] = None

    @field_validator('password')
    def validate_password(cls, v):
        if not any(c.isupper() for c in v):
            raise ValueError('Password must contain at least one uppercase letter')
        if not any(c.islower() for c in v):
            raise ValueError('Password must contain at least one lowercase letter')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v

    @model_validator(mode='after')
    def student_needs_career(self):
        if self.role == UserRole.STUDENT and self.career_id is None:
            raise ValueError('career_id is required for student users')
        return self

class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None

class UserAdminUpdate(UserUpdate):
    status: Optional[UserStatus] = None

class UserResponse(UserBase):
    id: uuid.UUID
    role: UserRole
    status: UserStatus
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class UserMiniResponse(BaseModel):
    id: uuid.UUID
    full_name: str
    email: Optional[str] = None
    status: Optional[UserStatus] = None

    model_config = {"from_attributes": True}

class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    page: int
    size: int
    pages: int

    model_config = {"from_attributes": True}
