import logging
import math
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi import HTTPException, status
from app.repositories.student import student_repository
from app.repositories.user import user_repository
from app.models.user import User, UserStatus
from app.schemas.student import StudentUpdate
import uuid

logger = logging.getLogger(__name__)

STUDENT_PROFILE_FIELDS = ("career_id", "current_cycle")

class StudentService:
    def __init__(self):
        self.repository = student_repository

    async def list_students(self, db: Session, skip: int = 0, limit: int = 10) -> Dict[str, Any]:
        items, total = self.repository.list(db, skip=skip, limit=limit)
        return {
            "items": items,
            "total": total,
            "page": (skip // limit) + 1,
            "size": limit,
            "pages": math.ceil(total / limit) if total else 0
        }

    async def get_student(self, db: Session, user_id: uuid.UUID) -> User:
        student = self.repository.get(db, user_id)
        if not student:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student with ID {user_id} not found"
            )
        return student

    async def update_student(
        self,
        db: Session,
        user_id: uuid.UUID,
        student_update: StudentUpdate,
        updated_by: Optional[uuid.UUID] = None
    ) -> User:
        student = await self.get_student(db, user_id)
        data = student_update.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in data and user_repository.email_taken(db, data["email"], exclude_id=student.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Email {data['email']} is already in use"
            )

        profile_data = {key: data.pop(key) for key in STUDENT_PROFILE_FIELDS if key in data}
        data["updated_by"] = updated_by

        try:
            self.repository.update(db, student, data, profile_data)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Conflict updating student {user_id}: {e.orig}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Student update conflicts with existing data or references a missing career"
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating student {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error updating student"
            )

        db.expire_all()
        return self.repository.get(db, user_id)

    async def delete_student(self, db: Session, user_id: uuid.UUID) -> Dict[str, str]:
        """Remove the user; profile and enrollments go with it."""
        student = await self.get_student(db, user_id)
        try:
            db.delete(student)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error deleting student {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error deleting student"
            )
        logger.info(f"Deleted student {user_id}")
        return {"message": f"Student with ID {user_id} deleted successfully"}

    async def get_active_with_career(self, db: Session) -> List[User]:
        return self.repository.get_active_with_career(db)

    async def get_enrollments_by_cycle(self, db: Session, user_id: uuid.UUID, cycle_id: uuid.UUID) -> Dict[str, Any]:
        student = await self.get_student(db, user_id)
        profile = student.student_profile
        enrollments = self.repository.get_enrollments_in_cycle(db, profile.id, cycle_id)
        return {
            "student": {
                "id": student.id,
                "name": student.full_name,
                "email": student.email,
                "career": profile.career,
            },
            "cycle_id": cycle_id,
            "enrollments": enrollments,
        }

    async def find_with_filters(
        self,
        db: Session,
        status: UserStatus = UserStatus.ACTIVE,
        career_id: Optional[uuid.UUID] = None,
        cycle_id: Optional[uuid.UUID] = None
    ) -> List[User]:
        return self.repository.find_with_filters(db, status=status, career_id=career_id, cycle_id=cycle_id)

    async def enrollment_report(self, db: Session) -> List[Dict[str, Any]]:
        try:
            return self.repository.enrollment_report(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error generating student enrollment report: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error generating student enrollment report"
            )


student_service = StudentService()
