"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at manager and service
boundaries.  Replaces raw dict passing between layers.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

__all__ = [
    "PageQuery",
    "PageResult",
    "RatingSummary",
    "ServiceResult",
]


# ---------------------------------------------------------------------------
# Listing models
# ---------------------------------------------------------------------------

class PageQuery(BaseModel):
    """Everything a repository needs to read one page of a table.

    ``or_filters`` are PostgREST ``or`` expressions; each one is applied
    as its own predicate, so several of them are AND-combined.
    """

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)
    sort_by: str = "created_at"
    descending: bool = True
    eq_filters: dict[str, object] = Field(default_factory=dict)
    or_filters: list[str] = Field(default_factory=list)

    @property
    def offset(self) -> int:
        """Zero-based index of the first row in the window."""
        return (self.page - 1) * self.page_size

    @property
    def last_index(self) -> int:
        """Zero-based, inclusive index of the last row in the window."""
        return self.offset + self.page_size - 1


class PageResult(BaseModel):
    """One page of raw rows plus the server-reported total for the filter."""

    rows: list[dict[str, object]] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class RatingSummary(BaseModel):
    """Positive/negative split of loaded feedback ratings."""

    positive: int = 0
    negative: int = 0
    total: int = 0


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    Every mutating manager method returns this, providing a consistent
    contract for the UI layer: callers check ``success`` instead of
    catching exceptions.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
