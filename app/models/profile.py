from sqlalchemy import Column, SmallInteger, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.models.base import BaseModel

class StudentProfile(BaseModel):
    __tablename__ = "student_profiles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    career_id = Column(Uuid(as_uuid=True), ForeignKey("careers.id", ondelete="RESTRICT"), nullable=False)
    current_cycle = Column(SmallInteger, default=1, nullable=False)

    __table_args__ = (
        CheckConstraint('current_cycle > 0', name='student_profiles_current_cycle_check'),
    )

    user = relationship("User", back_populates="student_profile")
    career = relationship("Career")
    enrollments = relationship("StudentSubject", back_populates="student_profile", cascade="all, delete-orphan")

class TeacherProfile(BaseModel):
    __tablename__ = "teacher_profiles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    speciality_id = Column(Uuid(as_uuid=True), ForeignKey("specialities.id", ondelete="SET NULL"), nullable=True)
    career_id = Column(Uuid(as_uuid=True), ForeignKey("careers.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="teacher_profile")
    speciality = relationship("Speciality")
    career = relationship("Career")
    subjects = relationship("SubjectAssignment", back_populates="teacher_profile", cascade="all, delete-orphan")
