from app.core.database import get_db
from app.dependencies import get_current_active_user, get_current_admin_user
from app.models.academic import SubjectAssignment
from app.routers.generator import create_crud_router

router = create_crud_router(
    model=SubjectAssignment,
    db_dependency=get_db,
    auth_dependency=get_current_active_user,
    write_dependency=get_current_admin_user,
    prefix="/subject-assignments",
    tag_prefix="Subject Assignments",
    soft_delete=False
)
