from sqlalchemy import Column, String, Integer, SmallInteger, Text, DECIMAL, Enum, Date, Boolean, TIMESTAMP, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship, column_property
from sqlalchemy import select
from sqlalchemy.sql import func
from sqlalchemy.schema import UniqueConstraint

from app.models.base import BaseModel
import enum

# --- ENUMERATIONS ---

class EnrollmentStatus(enum.Enum):
    ENROLLED = "enrolled"
    COMPLETED = "completed"
    DROPPED = "dropped"

# --- MODELS ---

class Career(BaseModel):
    __tablename__ = "careers"

    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(20), nullable=True, unique=True)
    description = Column(Text)
    total_cycles = Column(SmallInteger, default=10, nullable=False)

    __table_args__ = (
        CheckConstraint('total_cycles > 0', name='careers_total_cycles_check'),
    )

    subjects = relationship("Subject", back_populates="career")

class Speciality(BaseModel):
    __tablename__ = "specialities"

    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text)

class Cycle(BaseModel):
    __tablename__ = "cycles"

    name = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    period = Column(SmallInteger, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint('year', 'period', name='uq_cycle_year_period'),
        CheckConstraint('start_date <= end_date', name='cycles_date_range_check'),
    )

    subjects = relationship("Subject", back_populates="cycle")

class Subject(BaseModel):
    __tablename__ = "subjects"

    name = Column(String(255), nullable=False)
    code = Column(String(20), nullable=True, unique=True)
    credits = Column(SmallInteger, default=0, nullable=False)

    career_id = Column(Uuid(as_uuid=True), ForeignKey('careers.id', ondelete='RESTRICT'), nullable=False)
    cycle_id = Column(Uuid(as_uuid=True), ForeignKey('cycles.id', ondelete='SET NULL'), nullable=True)

    max_quota = Column(Integer, nullable=False)
    available_quota = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint('max_quota >= 0', name='subjects_max_quota_check'),
        CheckConstraint('available_quota >= 0', name='subjects_available_quota_check'),
        CheckConstraint('available_quota <= max_quota', name='subjects_quota_range_check'),
    )

    career = relationship("Career", back_populates="subjects")
    cycle = relationship("Cycle", back_populates="subjects")
    assignments = relationship("SubjectAssignment", back_populates="subject", cascade="all, delete-orphan")
    enrollments = relationship("StudentSubject", back_populates="subject")

# Teacher <-> Subject
class SubjectAssignment(BaseModel):
    __tablename__ = "subject_assignments"

    teacher_profile_id = Column(Uuid(as_uuid=True), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint('teacher_profile_id', 'subject_id', name='uq_teacher_subject_assignment'),
    )

    teacher_profile = relationship("TeacherProfile", back_populates="subjects")
    subject = relationship("Subject", back_populates="assignments")

# Student <-> Subject (enrollment)
class StudentSubject(BaseModel):
    __tablename__ = "student_subjects"

    student_profile_id = Column(Uuid(as_uuid=True), ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False)

    status = Column(Enum(EnrollmentStatus, values_callable=lambda obj: [e.value for e in obj],
                         name='enrollment_status', native_enum=False),
                    default=EnrollmentStatus.ENROLLED, nullable=False)
    grade = Column(DECIMAL(4, 2), nullable=True)
    enrolled_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('student_profile_id', 'subject_id', name='uq_student_subject_enrollment'),
        CheckConstraint('grade IS NULL OR grade BETWEEN 0 AND 20', name='student_subjects_grade_check'),
    )

    student_profile = relationship("StudentProfile", back_populates="enrollments")
    subject = relationship("Subject", back_populates="enrollments")

Cycle.subject_count = column_property(
    select(func.count(Subject.id))
    .where(Subject.cycle_id == Cycle.id, Subject.deleted_at.is_(None))
    .correlate_except(Subject)
    .scalar_subquery()
)
