from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.database import get_db
from app.core.config import settings
from app.core.exceptions import AccountInactiveError, AuthenticationError
from app.core.security import create_access_token
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import limiter
from app.models.profile import Profile
from app.schemas.account import ProfileView
from app.schemas.auth import UserLogin, LoginResponse, ChangePasswordRequest
from app.modules.auth.dependencies import get_current_user
from app.services.account_service import get_account_service


router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Login with email and password (rate limited)"""
    client_ip = request.client.host if request.client else "unknown"
    service = get_account_service(db)

    try:
        user = await service.authenticate(credentials.email, credentials.password)
    except (AuthenticationError, AccountInactiveError) as e:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason=e.message,
            client_ip=client_ip
        )
        raise

    set_user_id(str(user.user_id))

    token_data = {
        "sub": str(user.user_id),
        "email": user.email,
        "role": user.role.value
    }
    access_token = create_access_token(token_data)

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "must_change_password": user.must_change_password,
        "user": ProfileView.model_validate(user),
    }


@router.get("/me", response_model=ProfileView)
async def get_current_user_info(
    current_user: Profile = Depends(get_current_user)
):
    """Get current user information"""
    return ProfileView.model_validate(current_user)


@router.post("/change-password")
async def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    current_user: Profile = Depends(get_current_user),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Replace the caller's password; clears must_change_password"""
    service = get_account_service(db)
    await service.change_password(
        str(current_user.user_id),
        payload.current_password,
        payload.new_password,
    )

    logger.log_auth_event(
        event="change_password",
        success=True,
        user_email=current_user.email,
        client_ip=request.client.host if request.client else "unknown"
    )
    return {"success": True}
