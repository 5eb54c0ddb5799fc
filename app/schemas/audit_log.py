from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from datetime import datetime
from uuid import UUID
from app.models.audit_log import AuditAction

class AuditLogResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    action: AuditAction
    table_name: str
    record_id: Optional[UUID] = None

    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    success: bool
    error_message: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = {"from_attributes": True}

class AuditLogListResponse(BaseModel):
    total: int
    skip: int
    limit: int
    items: List[AuditLogResponse]
