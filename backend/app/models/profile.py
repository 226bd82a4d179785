from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """Account roles"""
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class Profile(Base):
    """Auth record: email, password hash, role and active flag only"""
    __tablename__ = "profiles"

    user_id = Column(GUID, primary_key=True, default=generate_uuid)
    role = Column(SQLEnum(UserRole), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    must_change_password = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    # Role-specific profiles (exactly one is set for TEACHER/STUDENT)
    teacher = relationship("Teacher", back_populates="profile", uselist=False)
    student = relationship("Student", back_populates="profile", uselist=False)

    def __repr__(self):
        return f"<Profile {self.email} ({self.role.value if self.role else '-'})>"
