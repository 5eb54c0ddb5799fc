from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import text, Integer, Uuid
from sqlalchemy.orm import Session, Query, selectinload
from app.models.user import User, UserRole, UserStatus
from app.models.profile import StudentProfile
from app.models.academic import Subject, StudentSubject

ENROLLMENT_REPORT_SQL = text("""
    SELECT
        u.id AS student_id,
        u.first_name || ' ' || u.last_name AS student_name,
        u.email AS student_email,
        c.name AS career_name,
        COUNT(ss.id) AS total_enrolled_subjects
    FROM users u
    INNER JOIN student_profiles sp ON sp.user_id = u.id
    INNER JOIN careers c ON c.id = sp.career_id
    LEFT JOIN student_subjects ss
        ON ss.student_profile_id = sp.id AND ss.deleted_at IS NULL
    WHERE u.role = :role AND u.status = :status AND u.deleted_at IS NULL
    GROUP BY u.id, u.first_name, u.last_name, u.email, c.name
    ORDER BY total_enrolled_subjects DESC, student_name ASC
""").columns(student_id=Uuid(as_uuid=True), total_enrolled_subjects=Integer)

class StudentRepository:
    """Read/write access to student users together with their profile."""

    def _query(self, db: Session) -> Query:
        return (
            db.query(User)
            .join(StudentProfile, StudentProfile.user_id == User.id)
            .filter(User.role == UserRole.STUDENT, User.deleted_at.is_(None))
            .options(
                selectinload(User.student_profile).selectinload(StudentProfile.career),
                selectinload(User.student_profile)
                .selectinload(StudentProfile.enrollments)
                .selectinload(StudentSubject.subject),
            )
        )

    def list(self, db: Session, skip: int = 0, limit: int = 100) -> Tuple[List[User], int]:
        query = self._query(db)
        total = query.count()
        items = query.order_by(User.created_at.desc(), User.id).offset(skip).limit(limit).all()
        return items, total

    def get(self, db: Session, user_id) -> Optional[User]:
        return self._query(db).filter(User.id == user_id).first()

    def get_active_with_career(self, db: Session) -> List[User]:
        return (
            self._query(db)
            .filter(User.status == UserStatus.ACTIVE)
            .order_by(User.first_name, User.last_name)
            .all()
        )

    def get_enrollments_in_cycle(self, db: Session, student_profile_id, cycle_id) -> List[StudentSubject]:
        return (
            db.query(StudentSubject)
            .join(Subject, Subject.id == StudentSubject.subject_id)
            .options(selectinload(StudentSubject.subject))
            .filter(
                StudentSubject.student_profile_id == student_profile_id,
                StudentSubject.deleted_at.is_(None),
                Subject.cycle_id == cycle_id,
            )
            .order_by(Subject.name)
            .all()
        )

    def find_with_filters(
        self,
        db: Session,
        status: UserStatus = UserStatus.ACTIVE,
        career_id=None,
        cycle_id=None
    ) -> List[User]:
        """AND of status, career and "enrolled in some subject of the cycle"."""
        query = self._query(db).filter(User.status == status)
        if career_id is not None:
            query = query.filter(StudentProfile.career_id == career_id)
        if cycle_id is not None:
            query = query.filter(
                StudentProfile.enrollments.any(
                    StudentSubject.subject.has(Subject.cycle_id == cycle_id)
                )
            )
        return query.order_by(User.first_name, User.last_name).all()

    def enrollment_report(self, db: Session) -> List[Dict[str, Any]]:
        rows = db.execute(
            ENROLLMENT_REPORT_SQL,
            {"role": UserRole.STUDENT.value, "status": UserStatus.ACTIVE.value}
        ).mappings().all()
        return [dict(row) for row in rows]

    def update(self, db: Session, user: User, user_data: Dict[str, Any], profile_data: Dict[str, Any]) -> User:
        """Apply changes to the user and its profile. Does not commit."""
        for field, value in user_data.items():
            setattr(user, field, value)
        for field, value in profile_data.items():
            setattr(user.student_profile, field, value)
        db.flush()
        return user

student_repository = StudentRepository()
