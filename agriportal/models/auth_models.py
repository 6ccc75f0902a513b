"""
Authentication Pipeline Models.

Pydantic models and enumerations for the auth request/response
contracts between ``AuthService`` and the UI layer.

Every auth operation returns a structured, inspectable result rather
than raising; the UI decides what to render from ``success`` and
``error_message`` alone.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from agriportal.models.enums import UserType


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Categories of authentication failure."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    ADMIN_REGISTRATION = "admin_registration"
    NETWORK_ERROR = "network_error"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN_ERROR = "unknown_error"


# ---------------------------------------------------------------------------
# Supabase error-code mapping
# ---------------------------------------------------------------------------

SUPABASE_ERROR_MAP: dict[str, AuthErrorCode] = {
    "invalid login credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "invalid_credentials": AuthErrorCode.INVALID_CREDENTIALS,
    "invalid_grant": AuthErrorCode.INVALID_CREDENTIALS,
    "email not confirmed": AuthErrorCode.EMAIL_NOT_CONFIRMED,
    "user already registered": AuthErrorCode.EMAIL_ALREADY_EXISTS,
    "user_already_exists": AuthErrorCode.EMAIL_ALREADY_EXISTS,
}


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Result of a single client-side validation check.

    Attributes
    ----------
    is_valid:
        ``True`` when the value passes the validation rule.
    error_message:
        Human-readable description of the failure, or ``None`` on success.
    """

    is_valid: bool
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for sign-in, sign-up, and sign-out.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        The provider's message text, or a fixed validation message.
    user_id, email, full_name, user_type:
        The resolved identity on a successful sign-in.
    redirect_to:
        Where the UI should navigate next.
    requires_confirmation:
        ``True`` after sign-up when the provider issued no session and
        the user must confirm their e-mail first.
    message:
        Informational text to show on success (e.g. confirmation hint).
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    user_type: Optional[UserType] = None
    redirect_to: Optional[str] = None
    requires_confirmation: bool = False
    message: Optional[str] = None
