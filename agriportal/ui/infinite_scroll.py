"""
Infinite Scroll Trigger.

Decides when a scroll position is close enough to the bottom to load the
next page.  The UI forwards its scroll metrics; the trigger guards
against overlapping loads and against loading past the last page.
"""

from __future__ import annotations

from typing import Awaitable, Callable

DEFAULT_THRESHOLD_PX = 300


class InfiniteScroll:
    """Calls *on_load_more* when the viewport nears the end of the content."""

    def __init__(
        self,
        on_load_more: Callable[[], Awaitable[object]],
        has_more: Callable[[], bool],
        threshold: int = DEFAULT_THRESHOLD_PX,
    ) -> None:
        self._on_load_more = on_load_more
        self._has_more = has_more
        self.threshold = threshold
        self.is_loading: bool = False

    async def handle_scroll(
        self,
        scroll_top: float,
        scroll_height: float,
        client_height: float,
    ) -> bool:
        """Load more if within ``threshold`` pixels of the bottom.

        Returns ``True`` when a load was triggered.
        """
        if self.is_loading or not self._has_more():
            return False

        distance_from_bottom = scroll_height - (scroll_top + client_height)
        if distance_from_bottom >= self.threshold:
            return False

        self.is_loading = True
        try:
            await self._on_load_more()
        finally:
            self.is_loading = False
        return True
