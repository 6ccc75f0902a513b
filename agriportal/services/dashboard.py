"""
Dashboard Service.

Backs the landing dashboard: the active carousel slides (ordered by
``order_index``) and the most recent activities with their current
booking counts.  Slide mutations are restricted to admins.
"""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

from agriportal.auth import SessionManager
from agriportal.logger import StructuredLogger
from agriportal.models.file_models import ChangeEvent, UploadFile
from agriportal.models.records import CarouselSlide, DashboardActivity
from agriportal.models.service_models import ServiceResult
from agriportal.repositories.base_repository import Row
from agriportal.repositories.catalog_repository import (
    ActivityRepository,
    CarouselRepository,
)
from agriportal.services.base_service import BaseService
from agriportal.services.list_manager import ListManager
from agriportal.services.realtime import RealtimeRelay, Subscription
from agriportal.utils.audit import log_audit_event
from agriportal.utils.general import error_message

_ADMIN_ONLY = "Only administrators can manage carousel slides"


def _enrolled_count(row: Row) -> int:
    """Read ``bookings: [{"count": n}]`` as produced by the aggregate select."""
    bookings = row.get("bookings")
    if isinstance(bookings, list) and bookings and isinstance(bookings[0], dict):
        return int(bookings[0].get("count") or 0)
    return 0


class DashboardService(BaseService):
    """Carousel slides plus featured activities.

    Parameters
    ----------
    carousel:
        ``ListManager`` bound to ``carousel_slides``.
    carousel_repo:
        Repository used for bulk slide reordering.
    activity_repo:
        Repository used for the booking-count aggregate.
    session:
        Shared identity holder (admin checks).
    logger:
        Structured logger.
    relay:
        Realtime relay for :meth:`watch`.
    activity_limit:
        How many featured activities to load.
    """

    def __init__(
        self,
        carousel: ListManager[CarouselSlide],
        carousel_repo: CarouselRepository,
        activity_repo: ActivityRepository,
        session: SessionManager,
        logger: StructuredLogger,
        relay: Optional[RealtimeRelay] = None,
        activity_limit: int = 6,
    ) -> None:
        super().__init__(logger)
        self.carousel = carousel
        self._carousel_repo = carousel_repo
        self._activity_repo = activity_repo
        self._session = session
        self._relay = relay
        self._activity_limit = activity_limit

        self.activities: list[DashboardActivity] = []
        self.loading: bool = False
        self.error: Optional[str] = None

    @property
    def slides(self) -> list[CarouselSlide]:
        return self.carousel.items

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_slides(self) -> ServiceResult[list[CarouselSlide]]:
        return await self.carousel.fetch()

    async def fetch_featured_activities(self) -> ServiceResult[list[DashboardActivity]]:
        """Load the newest activities with their ``enrolled_count``."""
        self.loading = True
        self.error = None
        try:
            rows = await self._activity_repo.fetch_recent_with_booking_counts(
                self._activity_limit,
            )
            activities = [
                DashboardActivity.model_validate({**row, "enrolled_count": _enrolled_count(row)})
                for row in rows
            ]
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error("Error fetching dashboard activities: %s", self.error)
            return ServiceResult(success=False, error=self.error, status_code=500)
        finally:
            self.loading = False

        self.activities = activities
        return ServiceResult(success=True, data=list(activities))

    async def refresh(self) -> None:
        """Reload both dashboard sections."""
        await self.fetch_slides()
        await self.fetch_featured_activities()

    # ------------------------------------------------------------------
    # Admin-only slide management
    # ------------------------------------------------------------------

    def _forbidden(self) -> Optional[ServiceResult]:
        if self._session.is_admin:
            return None
        self._logger.warning(
            "Carousel change refused for non-admin", extra={"user_id": self._session.user_id or "anonymous"},
        )
        return ServiceResult(success=False, error=_ADMIN_ONLY, status_code=403)

    async def create_slide(self, fields: Row, image: UploadFile) -> ServiceResult[CarouselSlide]:
        return self._forbidden() or await self.carousel.create(fields, [image])

    async def update_slide(
        self,
        slide_id: int,
        fields: Row,
        image: Optional[UploadFile] = None,
    ) -> ServiceResult[CarouselSlide]:
        files = [image] if image is not None else []
        return self._forbidden() or await self.carousel.update(slide_id, fields, files)

    async def delete_slide(self, slide_id: int) -> ServiceResult[int]:
        return self._forbidden() or await self.carousel.delete(slide_id)

    async def reorder_slides(self, slide_ids: Sequence[int]) -> ServiceResult[list[CarouselSlide]]:
        """Persist the display order: each slide gets its list position."""
        forbidden = self._forbidden()
        if forbidden is not None:
            return forbidden
        try:
            await self._carousel_repo.reorder(slide_ids)
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error("Error reordering carousel slides: %s", self.error)
            return ServiceResult(success=False, error=self.error, status_code=500)

        log_audit_event(
            self._logger, "REORDER", self.carousel.config.table, "all",
            self._session.user_id, details={"order": ",".join(map(str, slide_ids))},
        )
        return await self.carousel.fetch()

    # ------------------------------------------------------------------
    # Realtime
    # ------------------------------------------------------------------

    async def _on_activity_change(self, event: ChangeEvent) -> None:
        await self.fetch_featured_activities()

    @asynccontextmanager
    async def watch(self) -> AsyncIterator[list[Subscription]]:
        """Keep slides and featured activities live inside the block."""
        if self._relay is None:
            raise RuntimeError("No realtime relay configured for the dashboard")
        async with AsyncExitStack() as stack:
            slides = await stack.enter_async_context(self.carousel.watch())
            activities = await self._relay.subscribe(
                self._activity_repo.TABLE, self._on_activity_change,
            )
            stack.push_async_callback(activities.release)
            yield [slides, activities]
