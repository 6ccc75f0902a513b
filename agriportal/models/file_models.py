"""
Pydantic Models for File Uploads and Realtime Notifications.

Data transfer objects for files headed to object storage and for the
row-level change notifications coming back from the realtime relay.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from agriportal.models.enums import ChangeEventType


class UploadFile(BaseModel):
    """A file picked by the user, held in memory until uploaded."""

    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def extension(self) -> str:
        """Text after the last dot of the original name (whole name if none)."""
        return self.name.rsplit(".", 1)[-1]

    @property
    def size(self) -> int:
        return len(self.content)


class ChangeEvent(BaseModel):
    """Row-level change notification, normalised from the provider payload."""

    event_type: ChangeEventType
    table: str
    new: dict[str, object] = Field(default_factory=dict)
    old: dict[str, object] = Field(default_factory=dict)
    commit_timestamp: Optional[str] = None
