"""
Shared Enumerations for AgriPortal Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if user_type == 'admin'`` continues to work.
"""

from __future__ import annotations
from enum import StrEnum


class UserType(StrEnum):
    """Portal roles.

    Resolved purely from the admin e-mail allow-list; everyone who is not
    on the list is a regular ``USER``.
    """

    ADMIN = "admin"
    USER = "user"


class AuthState(StrEnum):
    """Lifecycle of the identity held by ``SessionManager``."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthChangeEvent(StrEnum):
    """Auth events the provider emits that the portal reacts to."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class ChangeEventType(StrEnum):
    """Row-level change kinds delivered by the realtime relay."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ReservationStatus(StrEnum):
    """Status of bookings, appointments, and training registrations."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class OrderStatus(StrEnum):
    """Order fulfilment workflow states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FeedbackType(StrEnum):
    """Whether feedback is about the portal in general or a product."""

    GENERAL = "general"
    PRODUCT = "product"


class SnackbarColor(StrEnum):
    """Severity of a transient notification."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class RouteAccess(StrEnum):
    """Who may enter a route subtree."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    USER = "user"
