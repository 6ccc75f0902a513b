"""
Generic Entity List Manager.

One ``ListManager`` drives a paginated, searchable, realtime-refreshed
view of a single table.  It mirrors the current page into plain
attributes (``items``, ``total``, ``page``, ``page_size``,
``search_query``, ``loading``, ``error``) and exposes the CRUD operations
that keep that mirror consistent.

Consistency policy
------------------
Every mutation and every realtime notification is followed by a full
refetch of the current page with the current search.  Nothing is spliced
into ``items`` locally.  Calls are not serialised: when two fetches
overlap, whichever response arrives last wins.
"""

from __future__ import annotations

import asyncio
import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, Optional, Sequence, TypeVar

from agriportal.auth import SessionManager
from agriportal.entities import EntityConfig, OwnershipScope
from agriportal.logger import StructuredLogger
from agriportal.models.file_models import ChangeEvent, UploadFile
from agriportal.models.records import Record
from agriportal.models.service_models import PageQuery, PageResult, ServiceResult
from agriportal.repositories.base_repository import (
    EntityRepository,
    Row,
    strip_server_fields,
)
from agriportal.repositories.storage_repository import StorageRepository
from agriportal.services.base_service import BaseService
from agriportal.services.realtime import RealtimeRelay, Subscription
from agriportal.utils.audit import log_audit_event
from agriportal.utils.general import error_message
from agriportal.utils.string_helpers import build_or_filter, build_search_filter

R = TypeVar("R", bound=Record)

UPLOAD_FAILED_MESSAGE = "Failed to upload image"


class ImageUploadError(Exception):
    """Raised internally when any file of a create/update fails to upload."""


class ListManager(BaseService, Generic[R]):
    """Paginated, searchable CRUD over one table.

    Parameters
    ----------
    config:
        Static description of the entity (table, model, search columns,
        ownership scope, attribution, files).
    repo:
        Repository bound to ``config.table``.
    session:
        Shared identity holder; read on every call, never cached.
    logger:
        Structured logger.
    storage:
        Storage relay, required only for entities with files.
    relay:
        Realtime relay, required only for :meth:`subscribe`.
    page_size:
        Initial window size (must be at least 1).
    """

    def __init__(
        self,
        config: EntityConfig,
        repo: EntityRepository,
        session: SessionManager,
        logger: StructuredLogger,
        storage: Optional[StorageRepository] = None,
        relay: Optional[RealtimeRelay] = None,
        page_size: int = 10,
    ) -> None:
        super().__init__(logger.bind(table=config.table))
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._config = config
        self._repo = repo
        self._session = session
        self._storage = storage
        self._relay = relay

        self.items: list[R] = []
        self.total: int = 0
        self.page: int = 1
        self.page_size: int = page_size
        self.search_query: str = ""
        self.loading: bool = False
        self.error: Optional[str] = None

        self._sort_by: str = config.sort_by
        self._descending: bool = config.descending

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def config(self) -> EntityConfig:
        return self._config

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages

    def _is_scoped_to_owner(self) -> bool:
        scope = self._config.ownership
        if scope is OwnershipScope.OWNER_ALWAYS:
            return True
        return scope is OwnershipScope.OWNER and not self._session.is_admin

    def _build_query(self) -> Optional[PageQuery]:
        """Translate current state into a ``PageQuery``.

        Returns ``None`` when the caller can see no rows at all (an
        owner-scoped list with nobody signed in).
        """
        eq_filters: dict[str, object] = dict(self._config.fixed_filters)
        or_filters: list[str] = []

        search = build_search_filter(self._config.search_fields, self.search_query)
        if search:
            or_filters.append(search)

        user_id = self._session.user_id
        if self._is_scoped_to_owner():
            if user_id is None:
                return None
            eq_filters["user_id"] = user_id
        elif (
            self._config.ownership is OwnershipScope.PUBLIC_OR_OWNER
            and not self._session.is_admin
        ):
            if user_id is None:
                eq_filters["is_public"] = True
            else:
                or_filters.append(
                    build_or_filter([("is_public", "eq", True), ("user_id", "eq", user_id)])
                )

        return PageQuery(
            page=self.page,
            page_size=self.page_size,
            sort_by=self._sort_by,
            descending=self._descending,
            eq_filters=eq_filters,
            or_filters=or_filters,
        )

    def _parse(self, row: Row) -> R:
        return self._config.model.model_validate(row)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        append: bool = False,
        sort_by: Optional[str] = None,
        descending: Optional[bool] = None,
    ) -> ServiceResult[list[R]]:
        """Load one page into ``items`` (replacing, or appending when *append*).

        On failure ``error`` is set, ``items`` and ``total`` keep their
        previous values, and a failed result is returned.
        """
        if (page is not None and page < 1) or (page_size is not None and page_size < 1):
            self.error = "Page and page size must be at least 1"
            return ServiceResult(success=False, error=self.error, status_code=400)

        if page is not None:
            self.page = page
        if page_size is not None:
            self.page_size = page_size
        if sort_by is not None:
            self._sort_by = sort_by
        if descending is not None:
            self._descending = descending

        self.loading = True
        self.error = None
        try:
            query = self._build_query()
            if query is None:
                result = PageResult()
            else:
                result = await self._repo.fetch_page(query)
            rows = [self._parse(row) for row in result.rows]
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error(
                "Error fetching %s: %s", self._config.table, self.error,
                extra={"page": self.page, "search": self.search_query},
            )
            return ServiceResult(success=False, error=self.error, status_code=500)
        finally:
            self.loading = False

        self.items = [*self.items, *rows] if append else rows
        self.total = result.total
        return ServiceResult(success=True, data=list(self.items))

    async def search(self, query: str) -> ServiceResult[list[R]]:
        self.search_query = query
        self.page = 1
        return await self.fetch()

    async def clear_search(self) -> ServiceResult[list[R]]:
        self.search_query = ""
        self.page = 1
        return await self.fetch()

    async def load_more(self) -> Optional[ServiceResult[list[R]]]:
        """Append the next page; returns ``None`` when there is none."""
        if not self.has_more:
            return None
        self.page += 1
        result = await self.fetch(append=True)
        if not result.success:
            self.page -= 1
        return result

    async def go_to_page(self, page: int) -> Optional[ServiceResult[list[R]]]:
        """Jump to *page*; out-of-range pages are ignored (returns ``None``)."""
        if page < 1 or page > self.total_pages:
            return None
        self.page = page
        return await self.fetch()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        fields: Row,
        files: Sequence[UploadFile] = (),
    ) -> ServiceResult[R]:
        """Insert a record, uploading *files* first, then refetch.

        Attribution columns are stamped from the signed-in identity and
        override anything in *fields*.
        """
        if self._config.file_required_on_create and not files:
            return ServiceResult(
                success=False, error="An image is required", status_code=400,
            )

        payload = strip_server_fields(dict(fields))
        self.loading = True
        self.error = None
        try:
            if files:
                payload.update(await self._file_patch(files))
            elif self._config.has_files:
                payload.setdefault(self._config.file_field, self._empty_file_value())
            payload.update(self._attribution())
            record = self._parse(await self._repo.insert(payload))
        except ImageUploadError:
            self.error = UPLOAD_FAILED_MESSAGE
            return ServiceResult(success=False, error=self.error, status_code=500)
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error("Error creating %s: %s", self._config.table, self.error)
            return ServiceResult(success=False, error=self.error, status_code=500)
        finally:
            self.loading = False

        log_audit_event(
            self._logger, "CREATE", self._config.table, record.id, self._session.user_id,
        )
        await self._after_create(record)
        await self.fetch()
        return ServiceResult(success=True, data=record, status_code=201)

    async def update(
        self,
        record_id: int,
        fields: Row,
        files: Sequence[UploadFile] = (),
        remove_files: bool = False,
    ) -> ServiceResult[R]:
        """Patch a record, then refetch.

        New *files* replace every stored file of the record (old objects
        are deleted before the upload).  ``remove_files`` with no new
        files deletes the stored files and clears the file column.
        """
        patch = strip_server_fields(dict(fields))
        self.loading = True
        self.error = None
        try:
            if not self._config.has_files:
                if files:
                    self._warn_files_ignored()
            elif files or remove_files:
                await self._remove_stored_files(record_id)
                if files:
                    patch.update(await self._file_patch(files))
                else:
                    patch[self._config.file_field] = self._empty_file_value()
            row = await self._repo.update(record_id, patch)
        except ImageUploadError:
            self.error = UPLOAD_FAILED_MESSAGE
            return ServiceResult(success=False, error=self.error, status_code=500)
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error(
                "Error updating %s/%s: %s", self._config.table, record_id, self.error,
            )
            return ServiceResult(success=False, error=self.error, status_code=500)
        finally:
            self.loading = False

        if row is None:
            self.error = f"Record {record_id} not found"
            return ServiceResult(success=False, error=self.error, status_code=404)

        record = self._parse(row)
        log_audit_event(
            self._logger, "UPDATE", self._config.table, record_id, self._session.user_id,
            details={"fields": ",".join(sorted(patch))},
        )
        await self.fetch()
        return ServiceResult(success=True, data=record)

    async def delete(self, record_id: int) -> ServiceResult[int]:
        """Delete a record and its stored files, then refetch.

        When the current page comes back empty and is not the first, the
        manager steps back one page and fetches again.
        """
        self.loading = True
        self.error = None
        try:
            await self._remove_stored_files(record_id)
            await self._repo.delete(record_id)
        except Exception as exc:
            self.error = error_message(exc)
            self._logger.error(
                "Error deleting %s/%s: %s", self._config.table, record_id, self.error,
            )
            return ServiceResult(success=False, error=self.error, status_code=500)
        finally:
            self.loading = False

        log_audit_event(
            self._logger, "DELETE", self._config.table, record_id, self._session.user_id,
        )
        await self.fetch()
        if not self.items and self.page > 1:
            self.page -= 1
            await self.fetch()
        return ServiceResult(success=True, data=record_id)

    async def _after_create(self, record: R) -> None:
        """Hook run after a successful insert, before the refetch."""

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _attribution(self) -> Row:
        identity = self._session.identity
        if identity is None:
            return {}
        return {
            column: getattr(identity, attribute)
            for column, attribute in self._config.attribution.items()
        }

    def _empty_file_value(self) -> object:
        return [] if self._config.multiple_files else None

    def _warn_files_ignored(self) -> None:
        self._logger.warning("%s does not store files; ignoring uploads", self._config.table)

    async def _file_patch(self, files: Sequence[UploadFile]) -> Row:
        """Upload *files* concurrently; any failure aborts the whole batch."""
        config = self._config
        if not config.has_files:
            self._warn_files_ignored()
            return {}
        if self._storage is None:
            self._logger.error("No storage configured for %s", config.table)
            raise ImageUploadError(UPLOAD_FAILED_MESSAGE)

        selected = list(files) if config.multiple_files else list(files)[:1]
        try:
            urls = await asyncio.gather(
                *(self._storage.upload(config.bucket, file) for file in selected)
            )
        except Exception as exc:
            self._logger.error(
                "Image upload to %s failed: %s", config.bucket, error_message(exc),
            )
            raise ImageUploadError(UPLOAD_FAILED_MESSAGE) from exc
        return {config.file_field: list(urls) if config.multiple_files else urls[0]}

    async def _remove_stored_files(self, record_id: int) -> None:
        """Best-effort removal of every stored file referenced by a record."""
        config = self._config
        if not config.has_files or self._storage is None:
            return
        try:
            row = await self._repo.get_fields(record_id, [config.file_field])
            value = row.get(config.file_field) if row else None
            urls = [value] if isinstance(value, str) else list(value or [])
            if urls:
                await self._storage.remove_urls(config.bucket, urls)
        except Exception as exc:
            self._logger.warning(
                "Could not remove stored files of %s/%s: %s",
                config.table, record_id, error_message(exc),
            )

    # ------------------------------------------------------------------
    # Realtime
    # ------------------------------------------------------------------

    def subscription_filter(self) -> Optional[str]:
        """Provider-side filter for the change feed, if the list is owner-scoped."""
        user_id = self._session.user_id
        if self._is_scoped_to_owner() and user_id is not None:
            return f"user_id=eq.{user_id}"
        return None

    async def subscribe(self) -> Subscription:
        """Refetch the current page on every change to the table."""
        if self._relay is None:
            raise RuntimeError(f"No realtime relay configured for {self._config.table}")
        return await self._relay.subscribe(
            self._config.table,
            self._on_change,
            filter=self.subscription_filter(),
        )

    @asynccontextmanager
    async def watch(self) -> AsyncIterator[Subscription]:
        """Keep the list live for the duration of the ``async with`` block."""
        subscription = await self.subscribe()
        try:
            yield subscription
        finally:
            await subscription.release()

    async def _on_change(self, event: ChangeEvent) -> None:
        self._logger.debug(
            "%s change on %s; refetching page %d",
            event.event_type, event.table, self.page,
        )
        await self.fetch()
