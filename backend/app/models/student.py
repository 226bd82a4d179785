from sqlalchemy import Column, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID


class Student(Base):
    """Student data, 1:1 with a STUDENT profile"""
    __tablename__ = "students"

    user_id = Column(GUID, ForeignKey("profiles.user_id", ondelete="CASCADE"), primary_key=True)
    roll_no = Column(String(32), unique=True, index=True, nullable=False)

    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    term = Column(String(10), nullable=False)  # year-term, e.g. "2-1"
    session = Column(String(10), nullable=False)  # admission year
    batch = Column(String(20), nullable=True)
    section = Column(String(10), nullable=True)
    cgpa = Column(Float, default=0.0, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="student", lazy="joined")

    def __repr__(self):
        return f"<Student {self.roll_no} {self.full_name}>"
