# Pydantic schemas
from app.schemas.account import (
    ProfileView,
    TeacherView,
    StudentView,
    StudentCreate,
    TeacherCreate,
    StudentUpdate,
    TeacherUpdate,
    StudentPatch,
    TeacherPatch,
)
from app.schemas.auth import (
    UserLogin,
    LoginResponse,
    ChangePasswordRequest,
)
