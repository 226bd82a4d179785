"""
Custom Exceptions for the Department Portal
===========================================

Service code raises these instead of generic Exception so the API layer can
give the admin a specific reason (duplicate vs validation vs system).

Usage:
    from app.core.exceptions import DuplicateEmailError

    raise DuplicateEmailError(email)
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortalError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(PortalError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class AccountInactiveError(AuthorizationError):
    """Account has been deactivated"""

    def __init__(self):
        super().__init__("Account is inactive")
        self.code = "ACCOUNT_INACTIVE"


# ============================================
# Resource Errors (404-type)
# ============================================

class AccountNotFoundError(PortalError):
    """Account not found"""

    status_code = 404

    def __init__(self, account_id: str):
        super().__init__(
            f"Account with ID '{account_id}' not found",
            code="ACCOUNT_NOT_FOUND",
            details={"account_id": account_id}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


# ============================================
# Uniqueness Errors (409-type)
# ============================================

class DuplicateEmailError(PortalError):
    """An account with this email already exists"""

    status_code = 409

    def __init__(self, role: str = "account"):
        super().__init__(
            f"A {role} with this email already exists",
            code="DUPLICATE_EMAIL",
            details={"field": "email"}
        )


class DuplicateIdentifierError(PortalError):
    """A role profile with this identifier already exists"""

    status_code = 409

    def __init__(self, role: str, field: str, label: str):
        super().__init__(
            f"A {role} with this {label} already exists",
            code="DUPLICATE_IDENTIFIER",
            details={"field": field}
        )


# ============================================
# Backend / Integrity Errors (500-type)
# ============================================

class BackendUnavailableError(PortalError):
    """Data store unreachable or not configured"""

    def __init__(self, message: str = "Database is not configured"):
        super().__init__(message, code="BACKEND_UNAVAILABLE")


class PartialWriteFailureError(PortalError):
    """Auth record persisted but its role profile could not be written or rolled back"""

    def __init__(self, account_id: str, message: str = ""):
        super().__init__(
            f"Account '{account_id}' was only partially created: {message}",
            code="PARTIAL_WRITE_FAILURE",
            details={"account_id": account_id}
        )


class CredentialHashError(PortalError):
    """Stored password hash is malformed and cannot be verified"""

    def __init__(self, message: str = "Stored credential hash is malformed"):
        super().__init__(message, code="CREDENTIAL_HASH_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.message,
        "code": error.code,
        "details": error.details,
    }
