"""
Notification Center.

The signed-in user's notifications.  The list is always scoped to the
current user, admins included.  Read-state changes go to the backend and
are followed by a refetch, like every other mutation.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Union

from agriportal.models.records import Notification
from agriportal.models.service_models import ServiceResult
from agriportal.repositories.notification_repository import NotificationRepository
from agriportal.services.list_manager import ListManager
from agriportal.utils.audit import log_audit_event
from agriportal.utils.general import error_message


class NotificationCenter(ListManager[Notification]):
    """``ListManager`` for ``notifications`` with read-state operations."""

    _repo: NotificationRepository

    @property
    def unread(self) -> list[Notification]:
        return [n for n in self.items if not n.is_read]

    @property
    def read(self) -> list[Notification]:
        return [n for n in self.items if n.is_read]

    @property
    def unread_count(self) -> int:
        return len(self.unread)

    async def mark_as_read(self, notification_id: int) -> ServiceResult[int]:
        return await self._apply(
            "MARK_READ",
            notification_id,
            lambda user_id: self._repo.mark_read(notification_id, user_id),
        )

    async def mark_all_as_read(self) -> ServiceResult[int]:
        return await self._apply("MARK_ALL_READ", "all", self._repo.mark_all_read)

    async def clear_read(self) -> ServiceResult[int]:
        """Delete every notification the user has already read."""
        return await self._apply("CLEAR_READ", "read", self._repo.delete_read)

    async def _apply(
        self,
        action: str,
        entity_id: Union[int, str],
        operation: Callable[[str], Awaitable[object]],
    ) -> ServiceResult[int]:
        user_id = self._session.user_id
        if user_id is None:
            return ServiceResult(
                success=False, error="Login required", status_code=401,
            )
        try:
            affected = await operation(user_id)
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error("Error updating notifications: %s", self.error)
            return ServiceResult(success=False, error=self.error, status_code=500)

        log_audit_event(self._logger, action, self.config.table, entity_id, user_id)
        await self.fetch()
        return ServiceResult(success=True, data=affected if isinstance(affected, int) else None)
