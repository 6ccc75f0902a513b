"""Route Registry.

Central registry of the portal's route subtrees and who may enter them.
The UI asks the registry to ``resolve`` every navigation; the answer says
whether to proceed or where to redirect instead.

Adding a screen under an existing subtree needs no registration; a new
subtree = one ``register()`` call.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel

from agriportal.auth import SessionManager
from agriportal.logger import StructuredLogger
from agriportal.models.enums import RouteAccess
from agriportal.services.auth_service import ADMIN_DASHBOARD_ROUTE, USER_DASHBOARD_ROUTE

LOGIN_ROUTE = "/login"


class RouteEntry:
    """Metadata for a single registered route subtree.

    Attributes
    ----------
    prefix:
        Path prefix the entry governs (e.g. ``'/admin'``).  Matches the
        prefix itself and everything below it.
    display_name:
        Human-readable name for navigation menus.
    access:
        Who may enter the subtree.
    """

    __slots__ = ("prefix", "display_name", "access")

    def __init__(self, prefix: str, display_name: str, access: RouteAccess) -> None:
        self.prefix = prefix
        self.display_name = display_name
        self.access = access

    def matches(self, path: str) -> bool:
        if self.prefix == "/":
            return path == "/"
        return path == self.prefix or path.startswith(self.prefix.rstrip("/") + "/")


class RouteDecision(BaseModel):
    """Outcome of a navigation check."""

    allowed: bool
    redirect_to: Optional[str] = None


class RouteRegistry:
    """Manages the collection of route subtrees.

    Parameters
    ----------
    logger:
        Structured logger for registration and denial events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register(
        self,
        prefix: str,
        display_name: str,
        access: RouteAccess = RouteAccess.AUTHENTICATED,
    ) -> None:
        """Register a route subtree."""
        if prefix in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", prefix)
        self._entries[prefix] = RouteEntry(prefix, display_name, access)
        self._logger.debug("Route registered: %s (%s)", prefix, access)

    def match(self, path: str) -> Optional[RouteEntry]:
        """Most specific registered entry for *path*, or ``None``."""
        candidates = [entry for entry in self._entries.values() if entry.matches(path)]
        if not candidates:
            return None
        return max(candidates, key=lambda entry: len(entry.prefix))

    def resolve(self, path: str, session: SessionManager) -> RouteDecision:
        """Decide whether the current session may navigate to *path*.

        - unregistered and public paths are always allowed
        - anonymous visitors to protected paths go to the login page, with
          the requested path carried in ``redirect``
        - non-admins are sent from the admin subtree to the user dashboard
        - admins are sent from the user subtree to the admin dashboard
        """
        entry = self.match(path)
        if entry is None or entry.access == RouteAccess.PUBLIC:
            return RouteDecision(allowed=True)

        if not session.is_authenticated:
            return self._deny(path, f"{LOGIN_ROUTE}?redirect={quote(path, safe='/')}")

        if entry.access == RouteAccess.ADMIN and not session.is_admin:
            return self._deny(path, USER_DASHBOARD_ROUTE)

        if entry.access == RouteAccess.USER and session.is_admin:
            return self._deny(path, ADMIN_DASHBOARD_ROUTE)

        return RouteDecision(allowed=True)

    def entries_for(self, access: RouteAccess) -> list[RouteEntry]:
        """Entries with the given access level, in registration order."""
        return [entry for entry in self._entries.values() if entry.access == access]

    def _deny(self, path: str, redirect_to: str) -> RouteDecision:
        self._logger.info("Navigation to %s redirected to %s", path, redirect_to)
        return RouteDecision(allowed=False, redirect_to=redirect_to)


def default_routes(logger: StructuredLogger) -> RouteRegistry:
    """The portal's route table: public landing and login, user and admin areas."""
    registry = RouteRegistry(logger)
    registry.register("/", "Home", RouteAccess.PUBLIC)
    registry.register(LOGIN_ROUTE, "Login", RouteAccess.PUBLIC)
    registry.register("/user", "User Area", RouteAccess.USER)
    registry.register("/admin", "Admin Area", RouteAccess.ADMIN)
    return registry
