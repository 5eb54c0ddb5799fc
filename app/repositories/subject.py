from typing import Any, Dict, List
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from app.routers.generic_crud import CRUDBase
from app.models.academic import Subject

class SubjectRepository(CRUDBase):
    default_order = [("name", "asc")]

    def __init__(self):
        super().__init__(Subject)

    def prepare_create(self, db: Session, data: Dict[str, Any]) -> Dict[str, Any]:
        """A new subject starts with every seat available unless told otherwise."""
        if data.get("available_quota") is None:
            data["available_quota"] = data["max_quota"]
        if data["available_quota"] > data["max_quota"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="available_quota cannot exceed max_quota"
            )
        return data

    def prepare_update(self, db: Session, db_obj: Subject, data: Dict[str, Any]) -> Dict[str, Any]:
        """Shift available seats by the same delta as max_quota; taken seats are preserved."""
        data.pop("available_quota", None)
        new_max = data.get("max_quota")
        if new_max is None or new_max == db_obj.max_quota:
            return data

        # lock the row so a concurrent enrollment cannot change the seat count under us
        db.refresh(db_obj, with_for_update=True)
        taken = db_obj.max_quota - db_obj.available_quota
        if new_max < taken:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot set max_quota to {new_max}: {taken} seats are already taken"
            )
        data["available_quota"] = new_max - taken
        return data

    def get_by_cycle(self, db: Session, cycle_id) -> List[Subject]:
        return db.query(Subject).filter(
            Subject.cycle_id == cycle_id,
            Subject.deleted_at.is_(None)
        ).order_by(Subject.name).all()

    def get_without_quota(self, db: Session) -> List[Subject]:
        """Subjects whose seats are all taken"""
        return db.query(Subject).filter(
            Subject.available_quota <= 0,
            Subject.deleted_at.is_(None)
        ).order_by(Subject.name).all()

subject_repository = SubjectRepository()
