from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, not_, select
from sqlalchemy.orm import Session, Query, selectinload
from app.models.user import User, UserRole, UserStatus
from app.models.profile import TeacherProfile
from app.models.academic import SubjectAssignment

class TeacherRepository:
    """Read/write access to teacher users together with their profile."""

    def _query(self, db: Session) -> Query:
        return (
            db.query(User)
            .join(TeacherProfile, TeacherProfile.user_id == User.id)
            .filter(User.role == UserRole.TEACHER, User.deleted_at.is_(None))
            .options(
                selectinload(User.teacher_profile).selectinload(TeacherProfile.speciality),
                selectinload(User.teacher_profile).selectinload(TeacherProfile.career),
                selectinload(User.teacher_profile)
                .selectinload(TeacherProfile.subjects)
                .selectinload(SubjectAssignment.subject),
            )
        )

    def list(self, db: Session, skip: int = 0, limit: int = 100) -> Tuple[List[User], int]:
        query = self._query(db)
        total = query.count()
        items = query.order_by(User.created_at.desc(), User.id).offset(skip).limit(limit).all()
        return items, total

    def get(self, db: Session, user_id) -> Optional[User]:
        return self._query(db).filter(User.id == user_id).first()

    def get_with_multiple_subjects(self, db: Session) -> List[User]:
        assigned_more_than_once = (
            select(SubjectAssignment.teacher_profile_id)
            .where(SubjectAssignment.deleted_at.is_(None))
            .group_by(SubjectAssignment.teacher_profile_id)
            .having(func.count(SubjectAssignment.id) > 1)
        )
        return (
            self._query(db)
            .filter(TeacherProfile.id.in_(assigned_more_than_once))
            .order_by(User.first_name, User.last_name)
            .all()
        )

    def find_with_filters(
        self,
        db: Session,
        speciality_id=None,
        career_id=None,
        has_subjects: Optional[bool] = None,
        status: UserStatus = UserStatus.ACTIVE,
        exclude_inactive: bool = True
    ) -> List[User]:
        query = self._query(db)

        if exclude_inactive:
            query = query.filter(not_(User.status == UserStatus.INACTIVE))
        else:
            query = query.filter(User.status == status)

        if speciality_id is not None:
            query = query.filter(TeacherProfile.speciality_id == speciality_id)
        if career_id is not None:
            query = query.filter(TeacherProfile.career_id == career_id)

        if has_subjects is not None:
            assigned = TeacherProfile.subjects.any(SubjectAssignment.deleted_at.is_(None))
            query = query.filter(assigned if has_subjects else not_(assigned))

        return query.order_by(User.first_name, User.last_name).all()

    def update(self, db: Session, user: User, user_data: Dict[str, Any], profile_data: Dict[str, Any]) -> User:
        """Apply changes to the user and its profile. Does not commit."""
        for field, value in user_data.items():
            setattr(user, field, value)
        for field, value in profile_data.items():
            setattr(user.teacher_profile, field, value)
        db.flush()
        return user

teacher_repository = TeacherRepository()
