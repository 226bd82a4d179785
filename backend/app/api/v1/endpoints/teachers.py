"""
Teacher account endpoints.

Create, deactivate, reset and update require ADMIN; listing is open to staff.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.core.exceptions import ValidationError
from app.models.profile import Profile, UserRole
from app.modules.auth.dependencies import get_current_admin, get_current_staff
from app.schemas.account import TeacherCreate, TeacherPatch, TeacherView
from app.services.account_service import get_account_service
from app.services.audit_service import log_admin_action


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_teacher(
    request: Request,
    payload: TeacherCreate,
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """
    Create a teacher account.

    generatedPassword is included only when no password was supplied.
    """
    account = await get_account_service(db).create_teacher(payload)

    await log_admin_action(
        db, str(admin.user_id), "account_created", "teacher",
        target_id=account.account_id,
        details={
            "teacher_uid": account.record.teacher_uid,
            "email": payload.email,
            "password_generated": account.generated,
        },
        request=request,
    )

    response = {"success": True, "data": account.record}
    if account.generated:
        response["generatedPassword"] = account.plaintext_secret
    return response


@router.get("", response_model=List[TeacherView])
async def list_teachers(
    search: Optional[str] = Query(None, max_length=100),
    include_inactive: bool = Query(True, alias="includeInactive"),
    current_user: Profile = Depends(get_current_staff),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """All teachers, newest first"""
    return await get_account_service(db).list_teachers(
        search=search, include_inactive=include_inactive
    )


@router.delete("")
async def deactivate_teacher(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Soft-delete a teacher account"""
    if not user_id:
        raise ValidationError("User ID required", field="userId")

    await get_account_service(db).deactivate(user_id, role=UserRole.TEACHER)

    await log_admin_action(
        db, str(admin.user_id), "account_deactivated", "teacher",
        target_id=user_id, request=request,
    )
    return {"success": True}


@router.patch("")
async def update_teacher(
    request: Request,
    payload: TeacherPatch,
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """reset_password returns the new password once; update_profile edits teacher fields"""
    service = get_account_service(db)

    if payload.action == "reset_password":
        new_password = await service.reset_password(payload.user_id)
        await log_admin_action(
            db, str(admin.user_id), "password_reset", "teacher",
            target_id=payload.user_id, request=request,
        )
        return {"success": True, "newPassword": new_password}

    changes = await service.update_teacher_profile(payload.user_id, payload.profile_updates())
    if changes:
        await log_admin_action(
            db, str(admin.user_id), "profile_updated", "teacher",
            target_id=payload.user_id, details=changes, request=request,
        )
    return {"success": True}
