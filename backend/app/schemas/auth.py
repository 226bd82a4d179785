from pydantic import BaseModel, Field, field_validator

from app.schemas.account import ProfileView, _normalize_email


class UserLogin(BaseModel):
    # Same check as account creation
    email: str
    password: str

    @field_validator('email', mode='before')
    @classmethod
    def valid_email(cls, v):
        return _normalize_email(v)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    must_change_password: bool = False
    user: ProfileView


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1)
