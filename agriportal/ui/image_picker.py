"""
Image Picker.

Validates picked image files against a type allow-list and a size cap,
keeps the accepted files, and renders base64 ``data:`` URL previews.
Accepted files are what a manager's ``create``/``update`` uploads.
"""

from __future__ import annotations

import base64
from typing import Optional, Sequence

from agriportal.config import AppConfig
from agriportal.models.file_models import UploadFile

DEFAULT_MAX_SIZE_MB = 5
DEFAULT_ALLOWED_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)


def data_url(file: UploadFile) -> str:
    """Inline preview of *file* as a ``data:`` URL."""
    encoded = base64.b64encode(file.content).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


class ImagePicker:
    """Single- or multi-image selection state.

    In single mode every selection replaces the previous one and only the
    first file picked is considered.  Invalid files are skipped; the last
    validation failure is kept in ``error``.
    """

    def __init__(
        self,
        max_size_mb: int = DEFAULT_MAX_SIZE_MB,
        allowed_types: Sequence[str] = DEFAULT_ALLOWED_TYPES,
        multiple: bool = False,
    ) -> None:
        self.max_size_mb = max_size_mb
        self.allowed_types: tuple[str, ...] = tuple(allowed_types)
        self.multiple = multiple

        self.files: list[UploadFile] = []
        self.previews: list[str] = []
        self.error: Optional[str] = None

    @classmethod
    def from_config(cls, config: AppConfig, multiple: bool = False) -> "ImagePicker":
        return cls(
            max_size_mb=config.IMAGE_MAX_SIZE_MB,
            allowed_types=config.ALLOWED_IMAGE_TYPES,
            multiple=multiple,
        )

    # -- Single-image accessors -------------------------------------------------

    @property
    def file(self) -> Optional[UploadFile]:
        return self.files[-1] if self.files else None

    @property
    def preview(self) -> Optional[str]:
        return self.previews[-1] if self.previews else None

    # -- Selection ----------------------------------------------------------------

    def validate(self, file: UploadFile) -> Optional[str]:
        """Return the rejection message for *file*, or ``None`` if acceptable."""
        if file.content_type not in self.allowed_types:
            return f"Invalid file type. Allowed types: {', '.join(self.allowed_types)}"
        if file.size > self.max_size_mb * 1024 * 1024:
            return f"File size exceeds {self.max_size_mb}MB limit"
        return None

    def select(self, files: Sequence[UploadFile]) -> list[UploadFile]:
        """Add *files* to the selection; returns the ones accepted."""
        if not files:
            return []

        self.error = None
        if not self.multiple:
            self.files = []
            self.previews = []

        accepted: list[UploadFile] = []
        for file in files if self.multiple else files[:1]:
            rejection = self.validate(file)
            if rejection is not None:
                self.error = rejection
                continue
            self.files.append(file)
            self.previews.append(data_url(file))
            accepted.append(file)
        return accepted

    def remove_image(self) -> None:
        """Drop the single-mode selection."""
        self.clear_all()

    def remove_image_at_index(self, index: int) -> None:
        if 0 <= index < len(self.files):
            del self.files[index]
            del self.previews[index]
        self.error = None

    def clear_all(self) -> None:
        self.files = []
        self.previews = []
        self.error = None
