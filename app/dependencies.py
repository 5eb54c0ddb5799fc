from fastapi import Depends, HTTPException, status, Query
from app.core.config import settings
from app.core.security import get_current_user
from app.models.user import User, UserRole, UserStatus

def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )
    return current_user

def require_roles(*roles: UserRole):
    """Dependency factory: allow only the listed roles (any role when none given)."""
    allowed = set(roles)

    def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if allowed and current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User does not have the required role"
            )
        return current_user

    return checker

get_current_admin_user = require_roles(UserRole.ADMIN)
get_current_teacher_or_admin = require_roles(UserRole.TEACHER, UserRole.ADMIN)
get_current_student_or_admin = require_roles(UserRole.STUDENT, UserRole.ADMIN)

# Common query parameters
class CommonQueryParams:
    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE,
                           description="Number of records to return"),
    ):
        self.skip = skip
        self.limit = limit

    @property
    def page(self) -> int:
        return (self.skip // self.limit) + 1
