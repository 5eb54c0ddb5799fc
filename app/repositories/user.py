from typing import Optional, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import or_
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from app.models.profile import StudentProfile, TeacherProfile
from app.core.security import get_password_hash, verify_password

PROFILE_FIELDS = ("career_id", "current_cycle", "speciality_id")

class UserRepository(BaseRepository[User]):
    def __init__(self):
        super().__init__(User)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == email,
            User.deleted_at.is_(None)).first()

    def email_taken(self, db: Session, email: str, exclude_id=None) -> bool:
        query = db.query(User.id).filter(User.email == email)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def create_user(self, db: Session, user_data: dict) -> User:
        """Insert the user and the profile that matches its role. Does not commit."""
        profile_data = {key: user_data.pop(key, None) for key in PROFILE_FIELDS}

        if "password" in user_data:
            user_data["password_hash"] = get_password_hash(user_data.pop("password"))

        db_user = User(**user_data)
        db.add(db_user)
        db.flush()

        if db_user.role == UserRole.STUDENT:
            db.add(StudentProfile(
                user_id=db_user.id,
                career_id=profile_data["career_id"],
                current_cycle=profile_data["current_cycle"] or 1,
            ))
        elif db_user.role == UserRole.TEACHER:
            db.add(TeacherProfile(
                user_id=db_user.id,
                speciality_id=profile_data["speciality_id"],
                career_id=profile_data["career_id"],
            ))
        db.flush()
        db.refresh(db_user)
        return db_user

    def authenticate(self, db: Session, email: str, password: str) -> Optional[User]:
        user = self.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    def _filtered(self, db: Session, role: Optional[UserRole] = None, search: Optional[str] = None):
        query = db.query(User).filter(User.deleted_at.is_(None))
        if role:
            query = query.filter(User.role == role)
        if search:
            query = query.filter(or_(
                User.first_name.ilike(f"%{search}%"),
                User.last_name.ilike(f"%{search}%"),
                User.email.ilike(f"%{search}%")
            ))
        return query

    def list_users(
        self,
        db: Session,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[User], int]:
        query = self._filtered(db, role, search)
        total = query.count()
        users = (
            query
            .order_by(User.last_name, User.first_name)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return users, total

# Initialize repository instance
user_repository = UserRepository()
