"""
Audit trail for admin actions on accounts.
"""

from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import logger
from app.models.audit_log import AuditLog


async def log_admin_action(
    db: Optional[AsyncSession],
    admin_id: str,
    action: str,
    target_type: str,
    target_id: str = None,
    details: dict = None,
    request: Request = None
) -> None:
    """
    Log an admin action to the audit log.

    Runs after the action has already been committed. A failed audit write
    is logged and swallowed so the caller still receives the one-time secret.
    """
    if db is None:
        return

    log = AuditLog(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
        ip_address=request.client.host if request and request.client else None,
        user_agent=request.headers.get("user-agent") if request else None
    )
    db.add(log)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.log_error_with_context(e, context="audit_log", action=action, target_id=target_id)
