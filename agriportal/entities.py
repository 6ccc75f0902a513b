"""
Entity Registry.

One ``EntityConfig`` per portal table.  A ``ListManager`` is fully
described by its config: which model rows become, which columns a search
matches, how non-admin callers are scoped, which identity attributes are
stamped on create, and where the entity's images live.

Adding an entity = one ``EntityConfig`` + one model class.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from agriportal.models.records import (
    Activity,
    Announcement,
    Appointment,
    Booking,
    CarouselSlide,
    Feedback,
    Notification,
    Order,
    Product,
    Record,
    Training,
    TrainingRegistration,
)


class OwnershipScope(StrEnum):
    """How rows are restricted for the caller."""

    NONE = "none"
    # Non-admins see only rows whose ``user_id`` is theirs.
    OWNER = "owner"
    # Non-admins see public rows plus their own.
    PUBLIC_OR_OWNER = "public_or_owner"
    # Everyone, admins included, sees only their own rows.
    OWNER_ALWAYS = "owner_always"


class EntityConfig(BaseModel):
    """Static description of one listable table.

    Attributes
    ----------
    table:
        PostgREST table name; also the realtime channel's table.
    model:
        Record subclass each fetched row is parsed into.
    search_fields:
        Columns matched case-insensitively, OR-combined, by ``search``.
    ownership:
        Row scoping applied to fetches and realtime subscriptions.
    attribution:
        ``column -> identity attribute`` pairs stamped on create
        (attributes: ``id``, ``email``, ``full_name``).
    file_field:
        Column holding the image URL (or URL list when
        ``multiple_files``).  ``None`` for entities without files.
    bucket:
        Storage bucket for the entity's images.
    file_required_on_create:
        Create fails validation when no file is supplied.
    fixed_filters:
        Equality filters applied to every fetch.
    """

    model_config = ConfigDict(frozen=True)

    table: str
    model: type[Record]
    search_fields: tuple[str, ...] = ()
    ownership: OwnershipScope = OwnershipScope.NONE
    attribution: dict[str, str] = Field(default_factory=dict)
    file_field: Optional[str] = None
    multiple_files: bool = False
    bucket: Optional[str] = None
    file_required_on_create: bool = False
    sort_by: str = "created_at"
    descending: bool = True
    fixed_filters: dict[str, object] = Field(default_factory=dict)

    @property
    def has_files(self) -> bool:
        return self.file_field is not None and self.bucket is not None


_CREATOR = {"created_by": "id"}


ANNOUNCEMENTS = EntityConfig(
    table="announcements",
    model=Announcement,
    search_fields=("title", "description"),
    attribution=_CREATOR,
    file_field="image_url",
    bucket="announcements",
)

ACTIVITIES = EntityConfig(
    table="activities",
    model=Activity,
    search_fields=("name", "description", "type"),
    attribution=_CREATOR,
    file_field="image_url",
    bucket="activities",
)

BOOKINGS = EntityConfig(
    table="bookings",
    model=Booking,
    search_fields=("activity_name", "user_name", "user_email"),
    ownership=OwnershipScope.OWNER,
    attribution={"user_id": "id", "user_name": "full_name", "user_email": "email"},
)

APPOINTMENTS = EntityConfig(
    table="appointments",
    model=Appointment,
    search_fields=("full_name", "email", "appointment_type"),
    ownership=OwnershipScope.OWNER,
    attribution={"user_id": "id"},
)

PRODUCTS = EntityConfig(
    table="products",
    model=Product,
    search_fields=("name", "category", "description"),
    attribution=_CREATOR,
    file_field="images",
    multiple_files=True,
    bucket="products",
)

ORDERS = EntityConfig(
    table="orders",
    model=Order,
    search_fields=("product_name", "buyer_name", "buyer_email"),
    ownership=OwnershipScope.OWNER,
    attribution={"user_id": "id", "buyer_name": "full_name", "buyer_email": "email"},
)

TRAININGS = EntityConfig(
    table="trainings",
    model=Training,
    search_fields=("name", "description"),
    attribution=_CREATOR,
    file_field="image_url",
    bucket="trainings",
    sort_by="start_date_time",
)

TRAINING_REGISTRATIONS = EntityConfig(
    table="training_registrations",
    model=TrainingRegistration,
    search_fields=("training_name", "user_name"),
    ownership=OwnershipScope.OWNER,
    attribution={"user_id": "id", "user_name": "full_name", "user_email": "email"},
)

FEEDBACKS = EntityConfig(
    table="feedbacks",
    model=Feedback,
    search_fields=("message", "user_name", "product"),
    ownership=OwnershipScope.PUBLIC_OR_OWNER,
    attribution={"user_id": "id", "user_name": "full_name", "user_email": "email"},
)

NOTIFICATIONS = EntityConfig(
    table="notifications",
    model=Notification,
    search_fields=("title", "message"),
    ownership=OwnershipScope.OWNER_ALWAYS,
    attribution={"user_id": "id"},
)

CAROUSEL_SLIDES = EntityConfig(
    table="carousel_slides",
    model=CarouselSlide,
    search_fields=("title", "description"),
    attribution=_CREATOR,
    file_field="image_url",
    bucket="carousel",
    file_required_on_create=True,
    sort_by="order_index",
    descending=False,
    fixed_filters={"is_active": True},
)


ALL_ENTITIES: dict[str, EntityConfig] = {
    config.table: config
    for config in (
        ANNOUNCEMENTS,
        ACTIVITIES,
        BOOKINGS,
        APPOINTMENTS,
        PRODUCTS,
        ORDERS,
        TRAININGS,
        TRAINING_REGISTRATIONS,
        FEEDBACKS,
        NOTIFICATIONS,
        CAROUSEL_SLIDES,
    )
}
