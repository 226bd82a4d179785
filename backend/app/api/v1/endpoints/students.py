"""
Student account endpoints.

Create, deactivate and update require ADMIN; listing is open to staff.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.core.exceptions import ValidationError
from app.models.profile import Profile, UserRole
from app.modules.auth.dependencies import get_current_admin, get_current_staff
from app.schemas.account import StudentCreate, StudentPatch, StudentView
from app.services.account_service import get_account_service
from app.services.audit_service import log_admin_action


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(
    request: Request,
    payload: StudentCreate,
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Create a student account; the initial password is returned once"""
    account = await get_account_service(db).create_student(payload)

    await log_admin_action(
        db, str(admin.user_id), "account_created", "student",
        target_id=account.account_id,
        details={"roll_no": payload.roll_no, "email": payload.email},
        request=request,
    )

    return {
        "success": True,
        "data": account.record,
        "initialPassword": account.plaintext_secret,
    }


@router.get("", response_model=List[StudentView])
async def list_students(
    search: Optional[str] = Query(None, max_length=100),
    include_inactive: bool = Query(True, alias="includeInactive"),
    session: Optional[str] = Query(None, max_length=10),
    term: Optional[str] = Query(None, max_length=10),
    current_user: Profile = Depends(get_current_staff),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """All students, newest first, optionally narrowed to one session or term"""
    return await get_account_service(db).list_students(
        search=search, include_inactive=include_inactive, session=session, term=term
    )


@router.delete("")
async def deactivate_student(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Soft-delete a student account"""
    if not user_id:
        raise ValidationError("User ID required", field="userId")

    await get_account_service(db).deactivate(user_id, role=UserRole.STUDENT)

    await log_admin_action(
        db, str(admin.user_id), "account_deactivated", "student",
        target_id=user_id, request=request,
    )
    return {"success": True}


@router.patch("")
async def update_student(
    request: Request,
    payload: StudentPatch,
    admin: Profile = Depends(get_current_admin),
    db: Optional[AsyncSession] = Depends(get_db)
):
    """Partial update of a student's profile fields"""
    changes = await get_account_service(db).update_student_profile(
        payload.user_id, payload.profile_updates()
    )

    if changes:
        await log_admin_action(
            db, str(admin.user_id), "profile_updated", "student",
            target_id=payload.user_id, details=changes, request=request,
        )
    return {"success": True}
