"""
Authentication Service.

Single orchestrator for every identity concern in the portal: session
restore, sign-in, registration, sign-out, provider auth events, and role
resolution.

Roles come only from the static admin e-mail allow-list
(``AppConfig.ADMIN_EMAILS``); nothing the user controls at sign-up can
make them an admin.

All methods return typed ``AuthResult`` or ``ValidationResult`` models;
the UI never inspects raw exceptions.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from agriportal.auth import SessionManager
from agriportal.config import AppConfig
from agriportal.database import BackendManager
from agriportal.logger import StructuredLogger
from agriportal.models.auth_models import (
    SUPABASE_ERROR_MAP,
    AuthErrorCode,
    AuthResult,
    ValidationResult,
)
from agriportal.models.enums import AuthChangeEvent, UserType
from agriportal.models.user import Identity
from agriportal.utils.general import error_message


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

# The provider's own default minimum.
_MIN_PASSWORD_LENGTH: int = 6

ADMIN_DASHBOARD_ROUTE = "/admin/dashboard"
USER_DASHBOARD_ROUTE = "/user/dashboard"
HOME_ROUTE = "/"

ADMIN_REGISTRATION_MESSAGE = (
    "Admin accounts cannot be created through registration. "
    "Please contact an administrator."
)
CONFIRM_EMAIL_MESSAGE = (
    "Please check your email to confirm your account before signing in."
)


def dashboard_route(user_type: UserType) -> str:
    """Landing page for *user_type* after sign-in."""
    return ADMIN_DASHBOARD_ROUTE if user_type == UserType.ADMIN else USER_DASHBOARD_ROUTE


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AuthService:
    """Centralised authentication service.

    Receives all infrastructure dependencies via ``__init__`` and
    exposes request -> result methods for every auth flow.

    Parameters
    ----------
    db:
        Backend connection owning the Supabase client.
    session:
        Injectable holder for the signed-in identity.
    config:
        Application configuration (admin allow-list).
    logger:
        Structured JSON logger for audit-grade logging.
    """

    def __init__(
        self,
        db: BackendManager,
        session: SessionManager,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        self._db: BackendManager = db
        self._session: SessionManager = session
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        """Validate an email address against a simplified RFC 5322 regex."""
        if not email or not email.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Email address is required.",
            )
        if not _EMAIL_RE.match(email.strip()):
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a valid email address.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_password(password: str) -> ValidationResult:
        if len(password) < _MIN_PASSWORD_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=(
                    f"Password must be at least {_MIN_PASSWORD_LENGTH} characters."
                ),
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip whitespace and lowercase."""
        return email.strip().lower()

    # ==================================================================
    # Role resolution
    # ==================================================================

    def determine_user_type(self, email: Optional[str]) -> UserType:
        """``ADMIN`` iff *email* is on the allow-list (case-insensitive)."""
        if email and self.normalize_email(email) in self._config.admin_emails:
            return UserType.ADMIN
        return UserType.USER

    def build_identity(self, user: Any, full_name: Optional[str] = None) -> Identity:
        """Derive an ``Identity`` from a provider user object.

        ``full_name`` falls back to the metadata name, then the e-mail
        local part, then ``"User"``.
        """
        email: str = getattr(user, "email", None) or ""
        metadata = getattr(user, "user_metadata", None) or {}
        name = (
            full_name
            or metadata.get("full_name")
            or (email.split("@")[0] if email else "")
            or "User"
        )
        return Identity(
            id=str(user.id),
            email=email,
            full_name=name,
            user_type=self.determine_user_type(email),
        )

    def _adopt_session(self, session: Any, full_name: Optional[str] = None) -> Identity:
        identity = self.build_identity(session.user, full_name)
        self._session.set_identity(identity)
        self._session.set_tokens(
            access_token=getattr(session, "access_token", None),
            refresh_token=getattr(session, "refresh_token", None),
            expires_at=getattr(session, "expires_at", None),
        )
        return identity

    def can_access_admin(self) -> bool:
        return self._session.is_admin

    def can_access_user(self) -> bool:
        return self._session.is_authenticated

    def get_user_role(self) -> Optional[UserType]:
        """The signed-in user's role, or ``None`` when anonymous."""
        return self._session.user_type

    def is_user_admin(self) -> bool:
        return self._session.is_admin

    # ==================================================================
    # Session restore
    # ==================================================================

    async def initialize(self) -> Optional[Identity]:
        """Restore a persisted provider session, if any.

        Any failure leaves the session anonymous.
        """
        self._session.begin_loading()
        try:
            session = await self._db.client.auth.get_session()
        except Exception as exc:
            self._logger.error("Error initializing auth: %s", error_message(exc))
            self._session.clear()
            return None

        if session is None or getattr(session, "user", None) is None:
            self._session.clear()
            return None

        identity = self._adopt_session(session)
        self._logger.info(
            "Session restored for %s (%s)", identity.email, identity.user_type,
            extra={"event": "SESSION_RESTORE", "user_id": identity.id},
        )
        return identity

    # ==================================================================
    # Sign-in
    # ==================================================================

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Authenticate with e-mail and password.

        Returns
        -------
        AuthResult
            On success carries the identity and ``redirect_to`` (the
            admin or user dashboard).  On failure carries the provider's
            message text and a classified ``error_code``.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )

        try:
            response = await self._db.client.auth.sign_in_with_password({
                "email": self.normalize_email(email),
                "password": password,
            })
        except Exception as exc:
            return self._classify_error(exc, "LOGIN_FAILED", "An error occurred during sign in")

        if response.session is None or response.user is None:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.UNKNOWN_ERROR,
                error_message="An error occurred during sign in",
            )

        identity = self._adopt_session(response.session)
        self._logger.info(
            "User authenticated: %s (type: %s)",
            identity.full_name,
            identity.user_type,
            extra={"event": "LOGIN", "email": identity.email, "user_id": identity.id},
        )
        return AuthResult(
            success=True,
            user_id=identity.id,
            email=identity.email,
            full_name=identity.full_name,
            user_type=identity.user_type,
            redirect_to=dashboard_route(identity.user_type),
        )

    # ==================================================================
    # Registration
    # ==================================================================

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        """Register a regular user.

        Allow-listed admin addresses are refused before any provider
        call.  When the provider returns no session the account awaits
        e-mail confirmation and ``requires_confirmation`` is set.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=email_check.error_message,
            )
        if self.determine_user_type(email) == UserType.ADMIN:
            self._logger.warning(
                "Refused registration of allow-listed admin address",
                extra={"event": "REGISTER_REFUSED", "email": email},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.ADMIN_REGISTRATION,
                error_message=ADMIN_REGISTRATION_MESSAGE,
            )
        pw_check = self.validate_password(password)
        if not pw_check.is_valid:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.VALIDATION_ERROR,
                error_message=pw_check.error_message,
            )

        email = self.normalize_email(email)
        full_name = full_name.strip()
        try:
            response = await self._db.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name}},
            })
        except Exception as exc:
            return self._classify_error(exc, "REGISTER_FAILED", "An error occurred during sign up")

        self._logger.info(
            "User registered: %s (%s).", full_name, email,
            extra={"event": "REGISTER", "email": email},
        )

        if response.session is not None and response.user is not None:
            identity = self._adopt_session(response.session, full_name=full_name or None)
            return AuthResult(
                success=True,
                user_id=identity.id,
                email=identity.email,
                full_name=identity.full_name,
                user_type=identity.user_type,
                redirect_to=USER_DASHBOARD_ROUTE,
            )

        return AuthResult(
            success=True,
            email=email,
            full_name=full_name,
            requires_confirmation=True,
            message=CONFIRM_EMAIL_MESSAGE,
        )

    # ==================================================================
    # Sign-out
    # ==================================================================

    async def sign_out(self) -> AuthResult:
        """Revoke the provider session and clear the identity.

        The local identity is kept when the provider call fails, so the
        UI can report the error and the user is still signed in.
        """
        user_email = self._session.email or "unknown"
        try:
            await self._db.client.auth.sign_out()
        except Exception as exc:
            message = error_message(exc)
            self._logger.warning("Sign-out failed for %s: %s", user_email, message)
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.UNKNOWN_ERROR,
                error_message=message or "An error occurred during sign out",
            )

        self._session.clear()
        self._logger.info(
            "User logged out: %s", user_email,
            extra={"event": "LOGOUT", "email": user_email},
        )
        return AuthResult(success=True, redirect_to=HOME_ROUTE)

    # ==================================================================
    # Provider auth events
    # ==================================================================

    def attach_listener(self) -> None:
        """Mirror provider auth events (sign-in, sign-out, token refresh)."""
        self._db.client.auth.on_auth_state_change(self.handle_auth_event)

    def handle_auth_event(self, event: str, session: Optional[object]) -> None:
        if event == AuthChangeEvent.SIGNED_IN and session is not None:
            identity = self._adopt_session(session)
            self._logger.info("Auth event SIGNED_IN for %s", identity.email)
        elif event == AuthChangeEvent.SIGNED_OUT:
            self._session.clear()
            self._logger.info("Auth event SIGNED_OUT")
        elif event == AuthChangeEvent.TOKEN_REFRESHED and session is not None:
            self._session.set_tokens(
                access_token=getattr(session, "access_token", None),
                refresh_token=getattr(session, "refresh_token", None),
                expires_at=getattr(session, "expires_at", None),
            )
            self._logger.debug("Auth event TOKEN_REFRESHED")

    # ==================================================================
    # Error classification
    # ==================================================================

    def _classify_error(self, exc: Exception, event: str, fallback: str) -> AuthResult:
        """Map a provider or network exception to a structured ``AuthResult``.

        The user sees the provider's own message; the code is for callers
        that branch on the failure kind.
        """
        message = error_message(exc) or fallback
        if isinstance(exc, (ConnectionError, TimeoutError)):
            code = AuthErrorCode.NETWORK_ERROR
        else:
            lowered = message.lower()
            code = next(
                (mapped for key, mapped in SUPABASE_ERROR_MAP.items() if key in lowered),
                AuthErrorCode.UNKNOWN_ERROR,
            )
        self._logger.warning(
            "Auth error (%s): %s", code, message,
            extra={"event": event, "error_code": str(code)},
        )
        return AuthResult(success=False, error_code=code, error_message=message)
