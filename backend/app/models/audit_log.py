from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AuditLog(Base):
    """Audit log for tracking admin actions on accounts"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    admin_id = Column(GUID, ForeignKey("profiles.user_id"), nullable=False, index=True)

    # Action details
    action = Column(String(100), nullable=False)  # e.g. 'account_created', 'password_reset'
    target_type = Column(String(50), nullable=False)  # 'teacher' or 'student'
    target_id = Column(GUID, nullable=True)

    # Changed field names and values; never secrets
    details = Column(JSON, nullable=True)

    # Request metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    admin = relationship("Profile", foreign_keys=[admin_id])

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_id}>"
