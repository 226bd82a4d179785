from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID


class TeacherDesignation(str, enum.Enum):
    """Faculty designations"""
    PROFESSOR = "PROFESSOR"
    ASSOCIATE_PROFESSOR = "ASSOCIATE_PROFESSOR"
    ASSISTANT_PROFESSOR = "ASSISTANT_PROFESSOR"
    LECTURER = "LECTURER"


class Teacher(Base):
    """Faculty data, 1:1 with a TEACHER profile"""
    __tablename__ = "teachers"

    user_id = Column(GUID, ForeignKey("profiles.user_id", ondelete="CASCADE"), primary_key=True)
    teacher_uid = Column(String(32), unique=True, index=True, nullable=False)

    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    designation = Column(SQLEnum(TeacherDesignation), nullable=False)
    department = Column(String(255), nullable=True)
    office_room = Column(String(50), nullable=True)
    on_leave = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="teacher", lazy="joined")

    def __repr__(self):
        return f"<Teacher {self.teacher_uid} {self.full_name}>"
