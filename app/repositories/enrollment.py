from typing import Any, Dict, Optional
from sqlalchemy.orm import Session, selectinload
from app.routers.generic_crud import CRUDBase
from app.models.academic import StudentSubject
from app.models.profile import StudentProfile

class EnrollmentRepository(CRUDBase):
    default_order = [("enrolled_at", "desc")]

    def __init__(self):
        super().__init__(StudentSubject)

    def get_detailed(self, db: Session, id) -> Optional[StudentSubject]:
        return (
            db.query(StudentSubject)
            .options(
                selectinload(StudentSubject.subject),
                selectinload(StudentSubject.student_profile).selectinload(StudentProfile.user),
                selectinload(StudentSubject.student_profile).selectinload(StudentProfile.career),
            )
            .filter(StudentSubject.id == id, StudentSubject.deleted_at.is_(None))
            .first()
        )

    def get_pair(self, db: Session, student_profile_id, subject_id, exclude_id=None) -> Optional[StudentSubject]:
        """Enrollment for the (student profile, subject) pair, soft-deleted rows included."""
        query = db.query(StudentSubject).filter(
            StudentSubject.student_profile_id == student_profile_id,
            StudentSubject.subject_id == subject_id,
        )
        if exclude_id is not None:
            query = query.filter(StudentSubject.id != exclude_id)
        return query.first()

    def add(self, db: Session, data: Dict[str, Any]) -> StudentSubject:
        """Insert without committing."""
        enrollment = StudentSubject(**data)
        db.add(enrollment)
        db.flush()
        return enrollment

enrollment_repository = EnrollmentRepository()
