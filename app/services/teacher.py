import logging
import math
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi import HTTPException, status
from app.repositories.teacher import teacher_repository
from app.repositories.user import user_repository
from app.models.user import User, UserStatus
from app.schemas.teacher import TeacherUpdate
import uuid

logger = logging.getLogger(__name__)

TEACHER_PROFILE_FIELDS = ("speciality_id", "career_id")

class TeacherService:
    def __init__(self):
        self.repository = teacher_repository

    async def list_teachers(self, db: Session, skip: int = 0, limit: int = 10) -> Dict[str, Any]:
        items, total = self.repository.list(db, skip=skip, limit=limit)
        return {
            "items": items,
            "total": total,
            "page": (skip // limit) + 1,
            "size": limit,
            "pages": math.ceil(total / limit) if total else 0
        }

    async def get_teacher(self, db: Session, user_id: uuid.UUID) -> User:
        teacher = self.repository.get(db, user_id)
        if not teacher:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Teacher with ID {user_id} not found"
            )
        return teacher

    async def update_teacher(
        self,
        db: Session,
        user_id: uuid.UUID,
        teacher_update: TeacherUpdate,
        updated_by: Optional[uuid.UUID] = None
    ) -> User:
        teacher = await self.get_teacher(db, user_id)
        data = teacher_update.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in data and user_repository.email_taken(db, data["email"], exclude_id=teacher.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Email {data['email']} is already in use"
            )

        profile_data = {key: data.pop(key) for key in TEACHER_PROFILE_FIELDS if key in data}
        data["updated_by"] = updated_by

        try:
            self.repository.update(db, teacher, data, profile_data)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Conflict updating teacher {user_id}: {e.orig}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Teacher update conflicts with existing data or references a missing speciality or career"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating teacher {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error updating teacher"
            )

        db.expire_all()
        return self.repository.get(db, user_id)

    async def delete_teacher(self, db: Session, user_id: uuid.UUID) -> Dict[str, str]:
        """Remove the user; profile and subject assignments go with it."""
        teacher = await self.get_teacher(db, user_id)
        try:
            db.delete(teacher)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error deleting teacher {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error deleting teacher"
            )
        logger.info(f"Deleted teacher {user_id}")
        return {"message": f"Teacher with ID {user_id} deleted successfully"}

    async def get_with_multiple_subjects(self, db: Session) -> List[User]:
        return self.repository.get_with_multiple_subjects(db)

    async def find_with_filters(
        self,
        db: Session,
        speciality_id: Optional[uuid.UUID] = None,
        career_id: Optional[uuid.UUID] = None,
        has_subjects: Optional[bool] = None,
        status: UserStatus = UserStatus.ACTIVE,
        exclude_inactive: bool = True
    ) -> List[User]:
        """
        speciality AND career AND (NOT inactive | status), optionally
        narrowed to teachers with or without subject assignments.
        """
        return self.repository.find_with_filters(
            db,
            speciality_id=speciality_id,
            career_id=career_id,
            has_subjects=has_subjects,
            status=status,
            exclude_inactive=exclude_inactive
        )


teacher_service = TeacherService()
