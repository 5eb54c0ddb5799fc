import logging
from typing import Optional, List, Tuple
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi import HTTPException, status
from app.services.base import BaseService
from app.repositories.user import user_repository
from app.models.user import User, UserRole, UserStatus
from app.schemas.user import UserCreate, UserUpdate
import uuid

logger = logging.getLogger(__name__)

class UserService(BaseService):
    def __init__(self):
        super().__init__(user_repository)
        self.repository = user_repository

    async def create_user(self, db: Session, user_create: UserCreate, created_by: Optional[uuid.UUID] = None) -> User:
        if self.repository.email_taken(db, user_create.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        user_data = user_create.model_dump()
        user_data["created_by"] = created_by
        user_data["updated_by"] = created_by

        try:
            new_user = self.repository.create_user(db, user_data)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Could not create user {user_create.email}: {e.orig}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User conflicts with existing data or references a missing career/speciality"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error creating user {user_create.email}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error creating user"
            )

        db.refresh(new_user)
        logger.info(f"Created {new_user.role.value} user {new_user.email}")
        return new_user

    async def authenticate_user(self, db: Session, email: str, password: str) -> Optional[User]:
        user = self.repository.authenticate(db, email, password)
        if not user or user.status != UserStatus.ACTIVE:
            return user

        user.last_login = datetime.now(timezone.utc)
        db.commit()
        return user

    async def get_user_by_email(self, db: Session, email: str) -> Optional[User]:
        return self.repository.get_by_email(db, email)

    async def update_user(
        self,
        db: Session,
        user_id: uuid.UUID,
        user_update: UserUpdate,
        id_updated_by: Optional[uuid.UUID] = None
    ) -> User:
        user = await self.get(db, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)
        update_data["updated_by"] = id_updated_by
        try:
            return self.repository.update(db, user, update_data)
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Could not update user {user_id}: {e.orig}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User conflicts with existing data or references a missing record"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating user {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error updating user"
            )

    async def deactivate_user(self, db: Session, user_id: uuid.UUID, current_user: User) -> User:
        """Deleting a user only marks it inactive."""
        if user_id == current_user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot delete your own account"
            )
        user = await self.get(db, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return self.repository.update(db, user, {
            "status": UserStatus.INACTIVE,
            "updated_by": current_user.id
        })

    async def list_users(
        self,
        db: Session,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[User], int]:
        return self.repository.list_users(db, role=role, search=search, skip=skip, limit=limit)


# Initialize service instance
user_service = UserService()
