from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session
from uuid import UUID
from app.core.database import get_db
from app.dependencies import get_current_admin_user
from app.models.audit_log import AuditAction
from app.models.user import User
from app.schemas.audit_log import AuditLogListResponse
from app.services.audit_log import audit_service

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"])

@router.get("/", response_model=AuditLogListResponse)
async def get_audit_logs(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Max records to return"),

    user_id: Optional[UUID] = Query(None, description="Who performed the action"),
    action: Optional[AuditAction] = Query(None, description="CREATE, DELETE, ENROLL, ..."),
    table_name: Optional[str] = Query(None, description="Affected table"),
    record_id: Optional[UUID] = Query(None, description="Affected record"),
    success: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Search in table_name, error and user_agent"),

    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Paginated audit trail (admin only)"""
    return audit_service.list_audit_logs(
        db=db,
        skip=skip,
        limit=limit,
        user_id=user_id,
        action=action,
        table_name=table_name,
        record_id=record_id,
        success=success,
        search=search
    )
