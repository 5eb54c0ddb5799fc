from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from uuid import UUID
from app.core.database import get_db
from app.dependencies import get_current_active_user, get_current_admin_user
from app.models.academic import Cycle
from app.repositories.cycle import cycle_repository
from app.repositories.subject import subject_repository
from app.routers.generator import create_crud_router
from app.schemas.academic import CycleCreate, CycleUpdate, CycleResponse, CycleDetailResponse, SubjectResponse
from app.services.cycle import cycle_service

base_router = create_crud_router(
    model=Cycle,
    db_dependency=get_db,
    auth_dependency=get_current_active_user,
    write_dependency=get_current_admin_user,
    crud=cycle_repository,
    schemas={"response": CycleResponse, "create": CycleCreate, "update": CycleUpdate},
    exclude_routes=["get"],
    prefix=""
)

router = APIRouter(prefix="/cycles", tags=["Cycles"])

@router.get("/active", response_model=CycleResponse)
async def get_active_cycle(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """The cycle currently marked active"""
    return await cycle_service.get_active_cycle(db)

@router.get("/{cycle_id}", response_model=CycleDetailResponse)
async def get_cycle(
    cycle_id: UUID = Path(..., description="Cycle ID"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Cycle with its subjects"""
    return await cycle_service.get_cycle_detail(db, cycle_id)

@router.get("/{cycle_id}/subjects", response_model=List[SubjectResponse])
async def get_cycle_subjects(
    cycle_id: UUID = Path(..., description="Cycle ID"),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    await cycle_service.get_cycle_detail(db, cycle_id)
    return subject_repository.get_by_cycle(db, cycle_id)

router.include_router(base_router)
