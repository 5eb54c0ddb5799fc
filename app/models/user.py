from sqlalchemy import Column, String, Enum, Boolean, Date, Text, TIMESTAMP
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class UserRole(enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"

class UserStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"

class User(BaseModel):
    __tablename__ = "users"

    # Basic info
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda obj: [e.value for e in obj],
        native_enum=False, name="user_role"), default=UserRole.STUDENT, nullable=False)
    status = Column(Enum(UserStatus, values_callable=lambda obj: [e.value for e in obj],
        native_enum=False, name="user_status"), default=UserStatus.ACTIVE, nullable=False)

    # Personal info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), index=True)
    date_of_birth = Column(Date)
    address = Column(Text)

    # Security
    last_login = Column(TIMESTAMP(timezone=True))
    is_first_login = Column(Boolean, default=True)

    # Profiles (one of them, depending on role)
    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    teacher_profile = relationship(
        "TeacherProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
