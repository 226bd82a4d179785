from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
import re

from app.models.profile import UserRole
from app.models.teacher import TeacherDesignation

# local@domain with at least one dot in the domain
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _require_text(value: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError("This field is required")
    return str(value).strip()


def _normalize_email(value: str) -> str:
    value = _require_text(value).lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value


# ============================================
# Read views (never carry password_hash)
# ============================================

class ProfileView(BaseModel):
    """Auth record as exposed to callers"""
    user_id: str
    role: UserRole
    email: str
    is_active: bool
    must_change_password: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TeacherView(BaseModel):
    """Teacher profile joined with its auth record"""
    user_id: str
    teacher_uid: str
    full_name: str
    phone: str
    designation: TeacherDesignation
    department: Optional[str] = None
    office_room: Optional[str] = None
    on_leave: bool = False
    created_at: datetime
    updated_at: datetime
    profile: ProfileView

    class Config:
        from_attributes = True


class StudentView(BaseModel):
    """Student profile joined with its auth record"""
    user_id: str
    roll_no: str
    full_name: str
    phone: str
    term: str
    session: str
    batch: Optional[str] = None
    section: Optional[str] = None
    cgpa: float = 0.0
    created_at: datetime
    updated_at: datetime
    profile: ProfileView

    class Config:
        from_attributes = True


# ============================================
# Create payloads
# ============================================

class StudentCreate(BaseModel):
    full_name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=20)
    roll_no: str = Field(..., max_length=32)
    term: str = Field(..., max_length=10)
    session: str = Field(..., max_length=10)
    batch: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=10)

    @field_validator('full_name', 'phone', 'roll_no', 'term', 'session', mode='before')
    @classmethod
    def required_text(cls, v):
        return _require_text(v)

    @field_validator('email', mode='before')
    @classmethod
    def valid_email(cls, v):
        return _normalize_email(v)


class TeacherCreate(BaseModel):
    full_name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., max_length=20)
    designation: TeacherDesignation
    # Generated as a 6-digit number when omitted
    password: Optional[str] = None
    teacher_uid: Optional[str] = Field(None, max_length=32)
    department: Optional[str] = Field(None, max_length=255)
    office_room: Optional[str] = Field(None, max_length=50)

    @field_validator('full_name', 'phone', mode='before')
    @classmethod
    def required_text(cls, v):
        return _require_text(v)

    @field_validator('email', mode='before')
    @classmethod
    def valid_email(cls, v):
        return _normalize_email(v)

    @field_validator('password', mode='before')
    @classmethod
    def blank_password_is_absent(cls, v):
        if v is None or (isinstance(v, str) and v == ""):
            return None
        return v


# ============================================
# Partial updates (role table only)
# ============================================

class TeacherUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    designation: Optional[TeacherDesignation] = None
    department: Optional[str] = Field(None, max_length=255)
    office_room: Optional[str] = Field(None, max_length=50)
    on_leave: Optional[bool] = None


class StudentUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    term: Optional[str] = Field(None, max_length=10)
    session: Optional[str] = Field(None, max_length=10)
    batch: Optional[str] = Field(None, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    cgpa: Optional[float] = Field(None, ge=0.0, le=4.0)


class TeacherPatch(TeacherUpdate):
    """PATCH /teachers body: either a password reset or a profile update"""
    user_id: str = Field(..., alias="userId")
    action: Literal["reset_password", "update_profile"]

    class Config:
        populate_by_name = True

    def profile_updates(self) -> TeacherUpdate:
        return TeacherUpdate(**self.model_dump(include=set(TeacherUpdate.model_fields), exclude_none=True))


class StudentPatch(StudentUpdate):
    """PATCH /students body"""
    user_id: str = Field(..., alias="userId")
    action: Literal["update_profile"]

    class Config:
        populate_by_name = True

    def profile_updates(self) -> StudentUpdate:
        return StudentUpdate(**self.model_dump(include=set(StudentUpdate.model_fields), exclude_none=True))
