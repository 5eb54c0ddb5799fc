from sqlalchemy.orm import Session
from typing import Optional, Dict, Any
from uuid import UUID

from app.models.audit_log import AuditLog, AuditAction
from sqlalchemy import or_

class AuditService:

    def log(
        self,
        db: Session,
        *,
        action: AuditAction,
        table_name: str,
        record_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        success: bool = True,
        error_message: Optional[str] = None
    ) -> AuditLog:
        """
        Add an audit row to the caller's transaction.

        The row is flushed, not committed: it is persisted or rolled back
        together with the change it describes.
        """
        log = AuditLog(
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
            success=success,
            error_message=error_message
        )
        db.add(log)
        db.flush()
        return log

    def list_audit_logs(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 20,
        user_id: Optional[UUID] = None,
        action: Optional[AuditAction] = None,
        table_name: Optional[str] = None,
        record_id: Optional[UUID] = None,
        success: Optional[bool] = None,
        search: Optional[str] = None
    ):
        query = db.query(AuditLog)

        if user_id:
            query = query.filter(AuditLog.user_id == user_id)

        if action:
            query = query.filter(AuditLog.action == action)

        if table_name:
            query = query.filter(AuditLog.table_name == table_name)

        if record_id:
            query = query.filter(AuditLog.record_id == record_id)

        if success is not None:
            query = query.filter(AuditLog.success == success)

        if search:
            ilike = f"%{search}%"
            query = query.filter(
                or_(
                    AuditLog.table_name.ilike(ilike),
                    AuditLog.error_message.ilike(ilike),
                    AuditLog.user_agent.ilike(ilike)
                )
            )

        total = query.count()

        items = (
            query
            .order_by(AuditLog.timestamp.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

        return {
            "total": total,
            "skip": skip,
            "limit": limit,
            "items": items
        }


audit_service = AuditService()
