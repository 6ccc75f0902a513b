"""
Entity Record Models.

One Pydantic model per portal table.  All of them share ``Record``:
a server-assigned integer ``id`` that can never be reassigned, plus the
server-controlled ``created_at`` / ``updated_at`` timestamps.

Unknown columns are ignored so a schema addition on the backend never
breaks a listing, and a NULL in a column with a default reads as that
default (a product inserted without images lists with ``images == []``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from agriportal.models.enums import (
    FeedbackType,
    OrderStatus,
    ReservationStatus,
)

__all__ = [
    "SERVER_MANAGED_FIELDS",
    "Record",
    "Announcement",
    "Activity",
    "Booking",
    "Appointment",
    "Product",
    "Order",
    "Training",
    "TrainingRegistration",
    "Feedback",
    "Notification",
    "CarouselSlide",
    "DashboardActivity",
]

# Columns the client must never send on insert or update.
SERVER_MANAGED_FIELDS: frozenset[str] = frozenset({"id", "created_at", "updated_at"})


class _Row(BaseModel):
    """Tolerates NULL in columns the client models with a default."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: object, info: ValidationInfo) -> object:
        if value is not None or info.field_name is None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        return field.get_default(call_default_factory=True)


class Record(_Row):
    """Base for every persisted row."""

    id: int = Field(frozen=True)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Content published by admins
# ---------------------------------------------------------------------------

class Announcement(Record):
    title: str
    description: str = ""
    duration: Optional[str] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None


class Activity(Record):
    name: str
    description: str = ""
    type: str = ""
    capacity: int = 0
    location: str = ""
    image_url: Optional[str] = None
    created_by: Optional[str] = None


class Product(Record):
    name: str
    category: str = ""
    description: Optional[str] = None
    price: float = 0.0
    stock: int = 0
    images: list[str] = Field(default_factory=list)
    created_by: Optional[str] = None


class Training(Record):
    name: str
    description: Optional[str] = None
    location: str = ""
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    topics: list[str] = Field(default_factory=list)
    capacity: int = 0
    image_url: Optional[str] = None
    created_by: Optional[str] = None


class CarouselSlide(Record):
    title: str
    description: str = ""
    image_url: Optional[str] = None
    order_index: int = 0
    is_active: bool = True
    created_by: Optional[str] = None


# ---------------------------------------------------------------------------
# Rows owned by the user who created them
# ---------------------------------------------------------------------------

class Booking(Record):
    activity_id: int
    activity_name: str = ""
    user_id: str
    user_name: str = ""
    user_email: str = ""
    booking_date: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING


class Appointment(Record):
    user_id: str
    full_name: str = ""
    email: str = ""
    contact_number: str = ""
    appointment_type: str = ""
    date: Optional[str] = None
    time: Optional[str] = None
    note: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING


class Order(Record):
    product_id: int
    product_name: str = ""
    quantity: int = Field(default=1, ge=1)
    total_price: float = 0.0
    user_id: str
    buyer_name: str = ""
    buyer_email: str = ""
    order_status: OrderStatus = OrderStatus.PENDING


class TrainingRegistration(Record):
    training_id: int
    training_name: str = ""
    user_id: str
    user_name: str = ""
    user_email: str = ""
    status: ReservationStatus = ReservationStatus.PENDING


class Feedback(Record):
    user_id: str
    user_name: str = ""
    user_email: str = ""
    profession: str = ""
    feedback_type: FeedbackType = FeedbackType.GENERAL
    product: Optional[str] = None
    message: str = ""
    rating: int = Field(default=0, ge=0, le=5)
    is_public: bool = False


class Notification(Record):
    user_id: str
    type: str = ""
    title: str = ""
    message: str = ""
    data: Optional[dict[str, object]] = None
    route: Optional[str] = None
    is_read: bool = False


# ---------------------------------------------------------------------------
# Read-only projections
# ---------------------------------------------------------------------------

class DashboardActivity(_Row):
    """An activity card on the dashboard, with its current booking count."""

    id: int
    name: str
    description: str = ""
    type: str = ""
    location: str = ""
    image_url: Optional[str] = None
    capacity: int = 0
    enrolled_count: int = 0
    created_at: Optional[datetime] = None

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.enrolled_count, 0)
