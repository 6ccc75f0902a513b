"""
Repository Layer Package.

Provides data-access abstractions over Supabase tables and storage.
All backend operations flow through repositories; managers and services
never call ``db.client`` directly (the realtime relay and auth service
are the only exceptions).

Usage:
    from agriportal.repositories import EntityRepository, StorageRepository
"""

from agriportal.repositories.base_repository import BaseRepository, EntityRepository
from agriportal.repositories.catalog_repository import (
    ActivityRepository,
    CarouselRepository,
    ProductRepository,
)
from agriportal.repositories.notification_repository import NotificationRepository
from agriportal.repositories.storage_repository import StorageRepository

__all__ = [
    "BaseRepository",
    "EntityRepository",
    "ActivityRepository",
    "CarouselRepository",
    "ProductRepository",
    "NotificationRepository",
    "StorageRepository",
]
