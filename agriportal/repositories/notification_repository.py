"""
Notification Repository.

Bulk read-state changes for the signed-in user's notifications.  Every
call is scoped to one ``user_id``; no method touches another user's rows.
"""

from __future__ import annotations

from agriportal.repositories.base_repository import EntityRepository


class NotificationRepository(EntityRepository):
    """Data access layer for ``notifications``."""

    TABLE = "notifications"

    async def mark_read(self, notification_id: int, user_id: str) -> None:
        await self.update_where(
            {"is_read": True},
            {"id": notification_id, "user_id": user_id},
        )

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of *user_id* read; returns the count."""
        rows = await self.update_where(
            {"is_read": True},
            {"user_id": user_id, "is_read": False},
        )
        return len(rows)

    async def delete_read(self, user_id: str) -> int:
        """Delete every already-read notification of *user_id*."""
        return await self.delete_where({"user_id": user_id, "is_read": True})
