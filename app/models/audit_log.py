from sqlalchemy import Column, String, Boolean, ForeignKey, Text, JSON, TIMESTAMP, Uuid
from sqlalchemy.sql import func
from sqlalchemy.types import Enum

import enum
from app.models.base import BaseModel

class AuditAction(enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ENROLL = "ENROLL"
    LOGIN = "LOGIN"

class AuditLog(BaseModel):
    __tablename__ = "audit_logs"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))

    action = Column(Enum(AuditAction, values_callable=lambda obj: [e.value for e in obj],
        native_enum=False, name='audit_action'), nullable=False)

    table_name = Column(String(100), nullable=False)
    record_id = Column(Uuid(as_uuid=True), nullable=True)

    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    timestamp = Column(TIMESTAMP(timezone=True), server_default=func.now())

    success = Column(Boolean, default=True)
    error_message = Column(Text, nullable=True)
