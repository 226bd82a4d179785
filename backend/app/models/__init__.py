# Re-export all models for convenient imports
from app.models.profile import Profile, UserRole
from app.models.teacher import Teacher, TeacherDesignation
from app.models.student import Student
from app.models.audit_log import AuditLog

__all__ = [
    # Auth
    "Profile",
    "UserRole",
    # Role profiles
    "Teacher",
    "TeacherDesignation",
    "Student",
    # Admin
    "AuditLog",
]
