from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
import uuid

# --- Compact representations reused by nested responses ---

class CareerMini(BaseModel):
    id: uuid.UUID
    name: str
    code: Optional[str] = None

    model_config = {"from_attributes": True}

class SpecialityMini(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}

class SubjectMini(BaseModel):
    id: uuid.UUID
    name: str
    code: Optional[str] = None
    cycle_id: Optional[uuid.UUID] = None
    max_quota: int
    available_quota: int

    model_config = {"from_attributes": True}

# --- Subjects ---

class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=20)
    credits: int = Field(0, ge=0)
    career_id: uuid.UUID
    cycle_id: Optional[uuid.UUID] = None
    max_quota: int = Field(..., ge=0)
    available_quota: Optional[int] = Field(None, ge=0, description="Defaults to max_quota")

    @model_validator(mode='after')
    def quota_within_max(self):
        if self.available_quota is not None and self.available_quota > self.max_quota:
            raise ValueError('available_quota cannot exceed max_quota')
        return self

class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=20)
    credits: Optional[int] = Field(None, ge=0)
    career_id: Optional[uuid.UUID] = None
    cycle_id: Optional[uuid.UUID] = None
    max_quota: Optional[int] = Field(None, ge=0)

class SubjectResponse(BaseModel):
    id: uuid.UUID
    name: str
    code: Optional[str] = None
    credits: int
    career_id: uuid.UUID
    cycle_id: Optional[uuid.UUID] = None
    max_quota: int
    available_quota: int
    career: Optional[CareerMini] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

# --- Cycles ---

class CycleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=3000)
    period: int = Field(..., ge=1, le=4)
    start_date: date
    end_date: date
    is_active: bool = False

    @model_validator(mode='after')
    def dates_in_order(self):
        if self.start_date > self.end_date:
            raise ValueError('start_date must be on or before end_date')
        return self

class CycleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=3000)
    period: Optional[int] = Field(None, ge=1, le=4)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

class CycleResponse(BaseModel):
    id: uuid.UUID
    name: str
    year: int
    period: int
    start_date: date
    end_date: date
    is_active: bool
    subject_count: int = 0

    model_config = {"from_attributes": True}

class CycleDetailResponse(CycleResponse):
    subjects: List[SubjectResponse] = []
