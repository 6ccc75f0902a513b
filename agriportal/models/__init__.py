from __future__ import annotations

"""
Data Models Package.

Re-exports the Pydantic models used across layers:
    from agriportal.models import Identity, Product, ServiceResult
    from agriportal.models import UserType, ChangeEventType
"""

from agriportal.models.enums import (
    AuthState,
    ChangeEventType,
    FeedbackType,
    OrderStatus,
    ReservationStatus,
    UserType,
)
from agriportal.models.file_models import ChangeEvent, UploadFile
from agriportal.models.records import (
    Activity,
    Announcement,
    Appointment,
    Booking,
    CarouselSlide,
    DashboardActivity,
    Feedback,
    Notification,
    Order,
    Product,
    Record,
    Training,
    TrainingRegistration,
)
from agriportal.models.service_models import (
    PageQuery,
    PageResult,
    RatingSummary,
    ServiceResult,
)
from agriportal.models.user import Identity

__all__ = [
    "AuthState",
    "ChangeEventType",
    "FeedbackType",
    "OrderStatus",
    "ReservationStatus",
    "UserType",
    "ChangeEvent",
    "UploadFile",
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
    "PageQuery",
    "PageResult",
    "RatingSummary",
    "ServiceResult",
    "Identity",
]
