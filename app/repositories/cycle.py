from typing import Any, Dict, Optional
from sqlalchemy.orm import Session, selectinload
from fastapi import HTTPException, status
from app.routers.generic_crud import CRUDBase
from app.models.academic import Cycle

class CycleRepository(CRUDBase):
    default_order = [("year", "desc"), ("period", "desc")]

    def __init__(self):
        super().__init__(Cycle)

    def _deactivate_others(self, db: Session, keep_id=None) -> int:
        query = db.query(Cycle).filter(Cycle.is_active.is_(True))
        if keep_id is not None:
            query = query.filter(Cycle.id != keep_id)
        return query.update({Cycle.is_active: False}, synchronize_session="fetch")

    def prepare_create(self, db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        # only one cycle may be active; runs in the same transaction as the insert
        if data.get("is_active"):
            self._deactivate_others(db)
        return data

    def prepare_update(self, db: Session, db_obj: Cycle, data: Dict[str, Any]) -> Dict[str, Any]:
        start = data.get("start_date", db_obj.start_date)
        end = data.get("end_date", db_obj.end_date)
        if start > end:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_date must be on or before end_date"
            )
        if data.get("is_active"):
            self._deactivate_others(db, keep_id=db_obj.id)
        return data

    def get_active(self, db: Session) -> Optional[Cycle]:
        return db.query(Cycle).filter(
            Cycle.is_active.is_(True),
            Cycle.deleted_at.is_(None)
        ).first()

    def get_with_subjects(self, db: Session, cycle_id) -> Optional[Cycle]:
        return db.query(Cycle).options(selectinload(Cycle.subjects)).filter(
            Cycle.id == cycle_id,
            Cycle.deleted_at.is_(None)
        ).first()

cycle_repository = CycleRepository()
