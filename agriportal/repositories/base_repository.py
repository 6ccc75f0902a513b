"""
Base Repository.

Provides shared infrastructure for all repositories:
- BackendManager reference
- Logger reference
- Generic paginated, filtered, counted reads over one PostgREST table
- Row-level insert / update / delete and RPC calls

Repositories never swallow backend errors; they propagate to the
manager or service that called them, which reports them as failures.
"""

from __future__ import annotations

from typing import Optional, Sequence

from supabase import AsyncClient

from agriportal.database import BackendManager
from agriportal.logger import StructuredLogger
from agriportal.models.records import SERVER_MANAGED_FIELDS
from agriportal.models.service_models import PageQuery, PageResult

Row = dict[str, object]


def _filter_value(value: object) -> object:
    """Render booleans the way PostgREST expects them in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def strip_server_fields(payload: Row) -> Row:
    """Drop ``id``, ``created_at`` and ``updated_at`` from a write payload."""
    return {k: v for k, v in payload.items() if k not in SERVER_MANAGED_FIELDS}


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(
        self,
        db: BackendManager,
        logger: StructuredLogger,
        table: Optional[str] = None,
    ) -> None:
        self._db = db
        self._logger = logger
        if table:
            self.TABLE = table

    @property
    def client(self) -> AsyncClient:
        """Returns the Supabase client (raises ``RuntimeError`` when offline)."""
        return self._db.client

    def _apply_eq(self, builder, eq_filters: dict[str, object]):
        for column, value in eq_filters.items():
            builder = builder.eq(column, _filter_value(value))
        return builder


class EntityRepository(BaseRepository):
    """Data access for one portal table addressed by integer ``id``."""

    async def fetch_page(self, query: PageQuery) -> PageResult:
        """Read the window ``[offset, last_index]`` with an exact total count.

        Each entry of ``query.or_filters`` becomes its own ``or`` predicate,
        so several of them are AND-combined.
        """
        builder = self.client.table(self.TABLE).select("*", count="exact")
        builder = self._apply_eq(builder, query.eq_filters)
        for expression in query.or_filters:
            builder = builder.or_(expression)
        response = await (
            builder
            .order(query.sort_by, desc=query.descending)
            .range(query.offset, query.last_index)
            .execute()
        )
        rows: list[Row] = list(response.data or [])
        total = response.count if response.count is not None else len(rows)
        return PageResult(rows=rows, total=total)

    async def get_by_id(self, record_id: int) -> Optional[Row]:
        """Fetch a single row by primary key, or ``None``."""
        response = await (
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    async def get_fields(self, record_id: int, columns: Sequence[str]) -> Optional[Row]:
        """Fetch only *columns* of one row (used to locate stored files)."""
        response = await (
            self.client.table(self.TABLE)
            .select(",".join(columns))
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    async def insert(self, payload: Row) -> Row:
        """Insert one row and return it as stored (server fields included)."""
        response = await (
            self.client.table(self.TABLE)
            .insert(strip_server_fields(payload))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Insert into {self.TABLE} returned no row.")
        return response.data[0]

    async def update(self, record_id: int, patch: Row) -> Optional[Row]:
        """Patch one row; returns the updated row or ``None`` if none matched."""
        response = await (
            self.client.table(self.TABLE)
            .update(strip_server_fields(patch))
            .eq("id", record_id)
            .execute()
        )
        return response.data[0] if response.data else None

    async def delete(self, record_id: int) -> None:
        await self.client.table(self.TABLE).delete().eq("id", record_id).execute()

    async def update_where(self, patch: Row, eq_filters: dict[str, object]) -> list[Row]:
        """Patch every row matching all *eq_filters*."""
        builder = self.client.table(self.TABLE).update(strip_server_fields(patch))
        response = await self._apply_eq(builder, eq_filters).execute()
        return list(response.data or [])

    async def delete_where(self, eq_filters: dict[str, object]) -> int:
        """Delete every row matching all *eq_filters*; returns how many went."""
        builder = self.client.table(self.TABLE).delete()
        response = await self._apply_eq(builder, eq_filters).execute()
        return len(response.data or [])

    async def call_rpc(self, function: str, params: dict[str, object]) -> object:
        """Invoke a Postgres function exposed through PostgREST."""
        response = await self.client.rpc(function, params).execute()
        return response.data
