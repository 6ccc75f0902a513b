"""
Authentication & Session State.

Provides an injectable ``SessionManager`` that holds the signed-in
``Identity`` and the lifecycle state of the auth bootstrap.  Every list
manager reads the same instance, so the identity is the only state shared
between them.

Usage::

    from agriportal.auth import SessionManager
    from agriportal.models.user import Identity

    session = SessionManager()
    session.begin_loading()
    session.set_identity(Identity(
        id="abc-123",
        email="grower@example.com",
        full_name="Jane Grower",
        user_type="user",
    ))
    identity = session.get_current_user()
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from agriportal.models.enums import AuthState, UserType
from agriportal.models.user import Identity


class SessionManager:
    """Injectable holder for the current identity.

    State machine::

        UNINITIALIZED -> LOADING -> AUTHENTICATED | ANONYMOUS

    ``AUTHENTICATED`` and ``ANONYMOUS`` may alternate afterwards as the
    provider reports sign-in and sign-out events.  Everything runs on one
    event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._state: AuthState = AuthState.UNINITIALIZED
        self._identity: Optional[Identity] = None
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None

    # -- Transitions ----------------------------------------------------------

    def begin_loading(self) -> None:
        """Mark that a session restore is in progress."""
        self._state = AuthState.LOADING

    def set_identity(self, identity: Identity) -> None:
        """Record *identity* as the signed-in user."""
        self._identity = identity
        self._state = AuthState.AUTHENTICATED

    def set_tokens(
        self,
        access_token: Optional[str],
        refresh_token: Optional[str],
        expires_at: Optional[int],
    ) -> None:
        """Store provider tokens for the current session.

        Parameters
        ----------
        access_token:
            The short-lived JWT access token.
        refresh_token:
            The long-lived refresh token.
        expires_at:
            Unix timestamp (seconds) when the access token expires, or
            ``None`` when the provider did not report one.
        """
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._token_expiry = (
            datetime.fromtimestamp(expires_at, tz=timezone.utc)
            if expires_at is not None
            else None
        )

    def clear(self) -> None:
        """Drop the identity and tokens; the session becomes anonymous."""
        self._identity = None
        self._access_token = None
        self._refresh_token = None
        self._token_expiry = None
        self._state = AuthState.ANONYMOUS

    # -- Queries --------------------------------------------------------------

    def get_current_user(self) -> Identity:
        """Return the signed-in identity.

        Raises:
            RuntimeError: If nobody is signed in.
        """
        if self._identity is None:
            raise RuntimeError("No user is currently authenticated. Login required.")
        return self._identity

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_ready(self) -> bool:
        """``True`` once the initial restore has settled either way."""
        return self._state in (AuthState.AUTHENTICATED, AuthState.ANONYMOUS)

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_admin(self) -> bool:
        return self._identity is not None and self._identity.is_admin

    @property
    def user_type(self) -> Optional[UserType]:
        return self._identity.user_type if self._identity else None

    @property
    def user_id(self) -> Optional[str]:
        return self._identity.id if self._identity else None

    @property
    def email(self) -> Optional[str]:
        return self._identity.email if self._identity else None

    @property
    def full_name(self) -> Optional[str]:
        return self._identity.full_name if self._identity else None

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    @property
    def is_token_expired(self) -> bool:
        """``True`` when the access token has expired or was never set."""
        if self._token_expiry is None:
            return True
        return datetime.now(timezone.utc) >= (self._token_expiry - timedelta(seconds=30))
