"""Search box and settings button shared by every list page."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from agriportal.models.enums import UserType

SearchHandler = Callable[[str], Awaitable[object]]


class PageActions:
    """Forwards search input to a list and resolves the settings route.

    *navigate* receives the route to open; when omitted the route is only
    returned.
    """

    def __init__(
        self,
        user_type: UserType,
        on_search: Optional[SearchHandler] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.user_type = UserType(user_type)
        self._on_search = on_search
        self._navigate = navigate

    @property
    def settings_route(self) -> str:
        return f"/{self.user_type}/settings"

    async def handle_search(self, query: str) -> None:
        if self._on_search is not None:
            await self._on_search(query)

    async def handle_clear_search(self) -> None:
        if self._on_search is not None:
            await self._on_search("")

    def handle_settings_click(self) -> str:
        route = self.settings_route
        if self._navigate is not None:
            self._navigate(route)
        return route
