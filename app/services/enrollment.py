import logging
from typing import Any, Dict, Optional
from sqlalchemy import text, update
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from fastapi import HTTPException, status
from app.core.config import settings
from app.models.academic import Subject, StudentSubject, EnrollmentStatus
from app.models.audit_log import AuditAction
from app.models.profile import StudentProfile
from app.models.user import UserStatus
from app.repositories.enrollment import enrollment_repository, EnrollmentRepository
from app.schemas.enrollment import EnrollmentCreate, EnrollmentUpdate, TransactionalEnrollmentResponse
from app.services.audit_log import audit_service
from uuid import UUID

logger = logging.getLogger(__name__)

TRANSACTION_CONFLICT_DETAIL = "Transaction conflict: Another enrollment is in progress. Please try again."
ENROLLED_MESSAGE = "Student successfully enrolled. Quota updated."

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
RETRYABLE_PGCODES = {"40001", "40P01", "55P03", "57014"}

def is_serialization_failure(exc: SQLAlchemyError) -> bool:
    """True when the database aborted the transaction because of a concurrent one."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in RETRYABLE_PGCODES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return "could not serialize" in message or "database is locked" in message

def _snapshot(enrollment: StudentSubject) -> Dict[str, Any]:
    return {
        "student_profile_id": str(enrollment.student_profile_id),
        "subject_id": str(enrollment.subject_id),
        "status": enrollment.status.value if enrollment.status else None,
        "grade": float(enrollment.grade) if enrollment.grade is not None else None,
    }

class EnrollmentService:
    """Student <-> subject enrollments"""

    def __init__(self, repository: EnrollmentRepository):
        self.repository = repository

    async def list_enrollments(self, db: Session, skip: int = 0, limit: int = 10) -> Dict[str, Any]:
        return self.repository.get_multi(db, skip=skip, limit=limit)

    async def get_enrollment(self, db: Session, enrollment_id: UUID) -> StudentSubject:
        enrollment = self.repository.get_detailed(db, enrollment_id)
        if not enrollment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Enrollment with ID {enrollment_id} not found"
            )
        return enrollment

    def _ensure_references(self, db: Session, student_profile_id: UUID, subject_id: UUID) -> None:
        if not db.get(StudentProfile, student_profile_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student profile with ID {student_profile_id} not found"
            )
        if not db.get(Subject, subject_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Subject with ID {subject_id} not found"
            )

    def _db_error(self, db: Session, exc: SQLAlchemyError, action: str) -> HTTPException:
        db.rollback()
        if isinstance(exc, IntegrityError):
            logger.warning(f"Integrity error while {action} enrollment: {exc.orig}")
            return HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Student is already enrolled in this subject"
            )
        logger.error(f"Error {action} enrollment: {exc}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error {action} enrollment"
        )

    def _commit(self, db: Session, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            raise self._db_error(db, e, action)

    async def create_enrollment(
        self,
        db: Session,
        enrollment_in: EnrollmentCreate,
        current_user_id: Optional[UUID] = None
    ) -> StudentSubject:
        """Plain insert; seat counters are not touched."""
        data = enrollment_in.model_dump(exclude_none=True)
        self._ensure_references(db, data["student_profile_id"], data["subject_id"])

        if self.repository.get_pair(db, data["student_profile_id"], data["subject_id"]):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Student is already enrolled in this subject"
            )

        data["created_by"] = current_user_id
        try:
            enrollment = self.repository.add(db, data)
            audit_service.log(
                db,
                action=AuditAction.CREATE,
                table_name=StudentSubject.__tablename__,
                record_id=enrollment.id,
                user_id=current_user_id,
                new_values=_snapshot(enrollment)
            )
            db.commit()
        except SQLAlchemyError as e:
            raise self._db_error(db, e, "creating")
        return await self.get_enrollment(db, enrollment.id)

    async def update_enrollment(
        self,
        db: Session,
        enrollment_id: UUID,
        enrollment_in: EnrollmentUpdate,
        current_user_id: Optional[UUID] = None
    ) -> StudentSubject:
        enrollment = await self.get_enrollment(db, enrollment_id)
        data = enrollment_in.model_dump(exclude_unset=True, exclude_none=True)

        student_profile_id = data.get("student_profile_id", enrollment.student_profile_id)
        subject_id = data.get("subject_id", enrollment.subject_id)
        if "student_profile_id" in data or "subject_id" in data:
            self._ensure_references(db, student_profile_id, subject_id)
            if self.repository.get_pair(db, student_profile_id, subject_id, exclude_id=enrollment.id):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Another enrollment already exists for this student and subject"
                )

        for field, value in data.items():
            setattr(enrollment, field, value)
        enrollment.updated_by = current_user_id
        self._commit(db, "updating")

        db.expire_all()
        return await self.get_enrollment(db, enrollment_id)

    async def delete_enrollment(
        self,
        db: Session,
        enrollment_id: UUID,
        current_user_id: Optional[UUID] = None
    ) -> Dict[str, str]:
        enrollment = await self.get_enrollment(db, enrollment_id)
        audit_service.log(
            db,
            action=AuditAction.DELETE,
            table_name=StudentSubject.__tablename__,
            record_id=enrollment.id,
            user_id=current_user_id,
            old_values=_snapshot(enrollment)
        )
        db.delete(enrollment)
        self._commit(db, "deleting")
        return {"message": f"Enrollment with ID {enrollment_id} deleted successfully"}

    def _apply_statement_timeout(self, tx: Session) -> None:
        timeout_ms = settings.ENROLLMENT_TRANSACTION_TIMEOUT_MS
        if timeout_ms and tx.get_bind().dialect.name == "postgresql":
            tx.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))

    def _enroll(
        self,
        tx: Session,
        student_profile_id: UUID,
        subject_id: UUID,
        current_user_id: Optional[UUID]
    ) -> Dict[str, Any]:
        # 1. the student must exist and be active
        profile = (
            tx.query(StudentProfile)
            .options(selectinload(StudentProfile.user))
            .filter(StudentProfile.id == student_profile_id, StudentProfile.deleted_at.is_(None))
            .first()
        )
        if not profile:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Student profile with ID {student_profile_id} not found"
            )
        if profile.user.status != UserStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Student is not active. Current status: {profile.user.status.value}"
            )

        # 2. the subject must have a free seat
        subject = (
            tx.query(Subject)
            .filter(Subject.id == subject_id, Subject.deleted_at.is_(None))
            .with_for_update()
            .first()
        )
        if not subject:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Subject with ID {subject_id} not found"
            )
        if subject.available_quota <= 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=(
                    f'No available quota for subject "{subject.name}". '
                    f"Current quota: {subject.available_quota}/{subject.max_quota}"
                )
            )
        previous_quota = subject.available_quota

        # 3. no second enrollment for the same pair
        if self.repository.get_pair(tx, student_profile_id, subject_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Student is already enrolled in this subject"
            )

        # 4. insert and take the seat
        enrollment = self.repository.add(tx, {
            "student_profile_id": student_profile_id,
            "subject_id": subject_id,
            "status": EnrollmentStatus.ENROLLED,
            "created_by": current_user_id,
        })
        taken = tx.execute(
            update(Subject)
            .where(Subject.id == subject_id, Subject.available_quota > 0)
            .values(available_quota=Subject.available_quota - 1)
            .execution_options(synchronize_session=False)
        ).rowcount
        if taken != 1:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f'No available quota for subject "{subject.name}"'
            )

        audit_service.log(
            tx,
            action=AuditAction.ENROLL,
            table_name=StudentSubject.__tablename__,
            record_id=enrollment.id,
            user_id=current_user_id,
            old_values={"available_quota": previous_quota},
            new_values={**_snapshot(enrollment), "available_quota": previous_quota - 1}
        )
        return {"enrollment_id": enrollment.id, "previous_quota": previous_quota}

    def enroll_student_with_transaction(
        self,
        db: Session,
        student_profile_id: UUID,
        subject_id: UUID,
        current_user_id: Optional[UUID] = None
    ) -> TransactionalEnrollmentResponse:
        """
        Enroll a student and decrement the subject's available seats atomically.

        Runs in its own SERIALIZABLE transaction on the request's engine. Every
        write, including the audit row, is rolled back on any failure.
        """
        with Session(bind=db.get_bind(), autoflush=False) as tx:
            try:
                tx.connection(execution_options={"isolation_level": "SERIALIZABLE"})
                self._apply_statement_timeout(tx)
                outcome = self._enroll(tx, student_profile_id, subject_id, current_user_id)
                tx.commit()
            except HTTPException as e:
                tx.rollback()
                logger.warning(
                    f"Enrollment of student profile {student_profile_id} in subject {subject_id} "
                    f"rejected: {e.detail}"
                )
                raise
            except SQLAlchemyError as e:
                tx.rollback()
                if isinstance(e, IntegrityError):
                    logger.warning(
                        f"Duplicate enrollment of student profile {student_profile_id} "
                        f"in subject {subject_id}: {e.orig}"
                    )
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Student is already enrolled in this subject"
                    )
                if is_serialization_failure(e):
                    logger.warning(
                        f"Enrollment of student profile {student_profile_id} in subject {subject_id} "
                        f"lost a concurrent transaction: {e}"
                    )
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail=TRANSACTION_CONFLICT_DETAIL
                    )
                logger.error(f"Error enrolling student profile {student_profile_id}: {e}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error enrolling student: {e}"
                )

            enrollment = self.repository.get_detailed(tx, outcome["enrollment_id"])
            subject = enrollment.subject
            logger.info(
                f"Enrolled student profile {student_profile_id} in subject {subject_id}; "
                f"quota {outcome['previous_quota']} -> {subject.available_quota}/{subject.max_quota}"
            )
            return TransactionalEnrollmentResponse.model_validate({
                "enrollment": enrollment,
                "updated_subject": subject,
                "message": ENROLLED_MESSAGE,
                "quota_info": {
                    "previous_quota": outcome["previous_quota"],
                    "current_quota": subject.available_quota,
                    "max_quota": subject.max_quota,
                },
            }, from_attributes=True)


enrollment_service = EnrollmentService(enrollment_repository)
