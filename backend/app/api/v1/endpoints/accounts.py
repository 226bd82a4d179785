"""
Cross-role account administration (ADMIN only).
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.core.exceptions import ValidationError
from app.models.profile import Profile, UserRole
from app.modules.auth.dependencies import get_current_admin
from app.schemas.account import ProfileView
from app.services.account_service import get_account_service
from app.services.audit_service import log_admin_action


router = APIRouter()


@router.get("", response_model=List[ProfileView])
async def list_accounts(
    role: Optional[UserRole] = None,
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Auth records of all roles, newest first"""
    return await get_account_service(db).list_accounts(role=role)


@router.delete("")
async def deactivate_account(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Soft-delete any account except the caller's own"""
    if not user_id:
        raise ValidationError("User ID required", field="userId")

    await get_account_service(db).deactivate(user_id, actor_id=str(admin.user_id))

    await log_admin_action(
        db, str(admin.user_id), "account_deactivated", "account",
        target_id=user_id, request=request,
    )
    return {"success": True}
