from fastapi import APIRouter
from app.core.database import get_db
from app.dependencies import get_current_active_user, get_current_admin_user
from app.models.academic import Career, Speciality
from app.routers.generator import create_crud_router

# Reads for any active user, writes for admins; deletes free the unique name
career_router = create_crud_router(
    model=Career,
    db_dependency=get_db,
    auth_dependency=get_current_active_user,
    write_dependency=get_current_admin_user,
    soft_delete=False
)

speciality_router = create_crud_router(
    model=Speciality,
    db_dependency=get_db,
    auth_dependency=get_current_active_user,
    write_dependency=get_current_admin_user,
    prefix="/specialities",
    tag_prefix="Specialities",
    soft_delete=False
)

router = APIRouter()
router.include_router(career_router)
router.include_router(speciality_router)
