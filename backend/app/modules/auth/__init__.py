# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_current_staff,
)

__all__ = [
    "get_current_user",
    "get_current_admin",
    "get_current_staff",
]
