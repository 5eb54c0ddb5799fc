from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.dependencies import get_current_active_user, get_current_admin_user, CommonQueryParams
from app.schemas.user import UserResponse, UserCreate, UserUpdate, UserAdminUpdate, UserListResponse
from app.services.user import user_service
from app.models.user import User, UserRole
from uuid import UUID

router = APIRouter()

@router.get("/me", response_model=UserResponse)
async def read_user_me(
    current_user: User = Depends(get_current_active_user)
):
    """Get current user profile"""
    return current_user

@router.put("/me", response_model=UserResponse)
async def update_user_me(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    """Update current user profile"""
    return await user_service.update_user(db, current_user.id, user_update, id_updated_by=current_user.id)

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_create: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Create new user with its role profile (admin only)"""
    return await user_service.create_user(db, user_create, current_user.id)

@router.get("/", response_model=UserListResponse)
async def list_users(
    commons: CommonQueryParams = Depends(),
    role: Optional[UserRole] = Query(None, description="Filter by user role"),
    search: Optional[str] = Query(None, description="Search in name and email"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """List users with filters (admin only)"""
    users, total = await user_service.list_users(
        db, role=role, search=search, skip=commons.skip, limit=commons.limit
    )
    pages = (total + commons.limit - 1) // commons.limit

    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=commons.page,
        size=commons.limit,
        pages=pages
    )

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Get user by ID (admin only)"""
    user = await user_service.get(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_update: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Update user (admin only)"""
    return await user_service.update_user(db, user_id, user_update, id_updated_by=current_user.id)

@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Deactivate user (admin only)"""
    await user_service.deactivate_user(db, user_id, current_user)
    return {"message": "User deleted successfully"}
