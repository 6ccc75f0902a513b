"""
Storage Repository.

Object-storage relay for entity images.  Uploads land at
``{random-token}-{epoch-millis}.{ext}`` inside the entity's bucket and
are addressed afterwards by their public URL.  The bucket-relative path
is recovered from that URL when a file has to be deleted.
"""

from __future__ import annotations

import secrets
import time
from typing import Optional, Sequence

from agriportal.config import AppConfig
from agriportal.models.file_models import UploadFile
from agriportal.repositories.base_repository import BaseRepository
from agriportal.database import BackendManager
from agriportal.logger import StructuredLogger


def generate_object_path(file: UploadFile) -> str:
    """Random, collision-resistant object name keeping the file extension."""
    return f"{secrets.token_hex(6)}-{int(time.time() * 1000)}.{file.extension}"


def path_from_public_url(url: str, bucket: str) -> Optional[str]:
    """Recover the bucket-relative path from a public URL.

    Returns ``None`` when the URL does not point into *bucket*.

    >>> path_from_public_url(
    ...     "https://x.supabase.co/storage/v1/object/public/products/a-1.png",
    ...     "products",
    ... )
    'a-1.png'
    """
    marker = f"/{bucket}/"
    if marker not in url:
        return None
    path = url.split(marker, 1)[1]
    return path or None


class StorageRepository(BaseRepository):
    """Uploads, resolves, and removes objects in Supabase storage buckets."""

    def __init__(
        self,
        db: BackendManager,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(db, logger)
        self._config = config

    async def upload(self, bucket: str, file: UploadFile) -> str:
        """Upload *file* and return its public URL.

        Raises whatever the storage client raises; callers decide whether
        the failure aborts their operation.
        """
        path = generate_object_path(file)
        storage = self.client.storage.from_(bucket)
        await storage.upload(
            path,
            file.content,
            file_options={
                "cache-control": self._config.STORAGE_CACHE_CONTROL,
                "content-type": file.content_type,
                "upsert": "false",
            },
        )
        url = await storage.get_public_url(path)
        self._logger.debug("Uploaded %s to bucket %s", path, bucket)
        return url

    async def remove_urls(self, bucket: str, urls: Sequence[str]) -> list[str]:
        """Delete the objects behind *urls*; returns the paths requested.

        URLs that do not belong to *bucket* are skipped.
        """
        paths = [
            path
            for path in (path_from_public_url(url, bucket) for url in urls if url)
            if path
        ]
        if not paths:
            return []
        await self.client.storage.from_(bucket).remove(paths)
        self._logger.debug("Removed %d object(s) from bucket %s", len(paths), bucket)
        return paths
