from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.repositories.cycle import cycle_repository
from app.models.academic import Cycle
from uuid import UUID

class CycleService:
    def __init__(self):
        self.repository = cycle_repository

    async def get_active_cycle(self, db: Session) -> Cycle:
        cycle = self.repository.get_active(db)
        if not cycle:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No active cycle found"
            )
        return cycle

    async def get_cycle_detail(self, db: Session, cycle_id: UUID) -> dict:
        """Cycle with its non-deleted subjects"""
        cycle = self.repository.get_with_subjects(db, cycle_id)
        if not cycle:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Cycle with ID {cycle_id} not found"
            )
        subjects = sorted(
            (s for s in cycle.subjects if s.deleted_at is None),
            key=lambda s: s.name
        )
        return {
            "id": cycle.id,
            "name": cycle.name,
            "year": cycle.year,
            "period": cycle.period,
            "start_date": cycle.start_date,
            "end_date": cycle.end_date,
            "is_active": cycle.is_active,
            "subject_count": cycle.subject_count,
            "subjects": subjects,
        }

cycle_service = CycleService()
