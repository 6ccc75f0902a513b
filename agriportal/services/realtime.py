"""
Realtime Change Relay.

Binds list managers to the provider's row-level change feed.  Each call
to :meth:`RealtimeRelay.subscribe` opens one channel and hands back a
``Subscription`` the caller owns; nothing is kept in module globals.

Provider callbacks are synchronous, so every notification is normalised
to a ``ChangeEvent`` and its async handler is scheduled on the event loop
that created the subscription.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Awaitable, Callable, Optional

from agriportal.database import BackendManager
from agriportal.logger import StructuredLogger
from agriportal.models.enums import ChangeEventType
from agriportal.models.file_models import ChangeEvent
from agriportal.services.base_service import BaseService

ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]

_channel_ids = itertools.count(1)


def parse_change_payload(payload: dict, table: str) -> Optional[ChangeEvent]:
    """Normalise a raw provider payload; ``None`` if it is not a row change.

    Accepts both the wrapped shape (``{"data": {"type", "record",
    "old_record", ...}}``) and the flat one (``{"eventType", "new",
    "old"}``).
    """
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    if not isinstance(data, dict):
        return None
    raw_type = data.get("type") or data.get("eventType")
    try:
        event_type = ChangeEventType(str(raw_type).upper())
    except ValueError:
        return None
    return ChangeEvent(
        event_type=event_type,
        table=data.get("table") or table,
        new=data.get("record") or data.get("new") or {},
        old=data.get("old_record") or data.get("old") or {},
        commit_timestamp=data.get("commit_timestamp"),
    )


class Subscription:
    """Handle for one open realtime channel.

    ``release()`` is idempotent.  Usable as ``async with`` so the channel
    is released when the block exits.  An inert subscription (``active``
    is ``False`` from the start) is returned when the channel could not be
    opened.
    """

    def __init__(
        self,
        relay: "RealtimeRelay",
        table: str,
        channel: Optional[object],
    ) -> None:
        self._relay = relay
        self.table = table
        self._channel = channel

    @property
    def active(self) -> bool:
        return self._channel is not None

    async def release(self) -> None:
        channel, self._channel = self._channel, None
        if channel is not None:
            await self._relay.release_channel(channel, self.table)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.release()


class RealtimeRelay(BaseService):
    """Opens change-feed channels on the shared Supabase client.

    Parameters
    ----------
    db:
        Backend connection owning the ``AsyncClient``.
    logger:
        Structured logger for channel lifecycle events.
    """

    def __init__(self, db: BackendManager, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._db = db
        self._tasks: set[asyncio.Task] = set()

    async def subscribe(
        self,
        table: str,
        handler: ChangeHandler,
        event: str = "*",
        filter: Optional[str] = None,
    ) -> Subscription:
        """Open a channel for *table* and route every change to *handler*.

        Failures are logged and produce an inert ``Subscription``.
        """
        loop = asyncio.get_running_loop()

        def _callback(payload: dict) -> None:
            change = parse_change_payload(payload, table)
            if change is None:
                self._logger.debug("Ignoring non-row payload on %s", table)
                return
            loop.call_soon_threadsafe(self._dispatch, handler, change)

        try:
            channel = self._db.client.channel(f"{table}-changes-{next(_channel_ids)}")
            options: dict[str, str] = {"schema": "public", "table": table}
            if filter:
                options["filter"] = filter
            channel.on_postgres_changes(event, callback=_callback, **options)
            await channel.subscribe()
        except Exception as exc:
            self._logger.error("Could not subscribe to %s changes: %s", table, exc)
            return Subscription(self, table, None)

        self._logger.info(
            "Subscribed to %s changes", table, extra={"filter": filter or "none"},
        )
        return Subscription(self, table, channel)

    async def release_channel(self, channel: object, table: str) -> None:
        try:
            await self._db.client.remove_channel(channel)
            self._logger.info("Released %s subscription", table)
        except Exception as exc:
            self._logger.warning("Could not release %s subscription: %s", table, exc)

    async def wait_idle(self) -> None:
        """Wait until every scheduled handler has finished."""
        # Let pending call_soon_threadsafe dispatches create their tasks.
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _dispatch(self, handler: ChangeHandler, change: ChangeEvent) -> None:
        task = asyncio.ensure_future(self._run(handler, change))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, handler: ChangeHandler, change: ChangeEvent) -> None:
        try:
            await handler(change)
        except Exception as exc:
            self._logger.error(
                "Change handler for %s failed: %s", change.table, exc, exc_info=True,
            )
