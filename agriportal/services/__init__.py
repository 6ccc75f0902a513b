"""
Business Logic Services Package.

Contains the list managers, their entity specialisations, the dashboard,
and the auth service.  Services depend on the Repository layer for data
access and on ``SessionManager`` for the signed-in identity.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the UI layer can consume without knowing the
internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from agriportal import entities
from agriportal.auth import SessionManager
from agriportal.config import AppConfig
from agriportal.database import BackendManager
from agriportal.logger import get_logger
from agriportal.models.records import (
    Activity,
    Announcement,
    Appointment,
    Booking,
    CarouselSlide,
    Product,
    Training,
    TrainingRegistration,
)
from agriportal.repositories.base_repository import EntityRepository
from agriportal.repositories.catalog_repository import (
    ActivityRepository,
    CarouselRepository,
    ProductRepository,
)
from agriportal.repositories.notification_repository import NotificationRepository
from agriportal.repositories.storage_repository import StorageRepository
from agriportal.services.auth_service import AuthService
from agriportal.services.dashboard import DashboardService
from agriportal.services.feedback import FeedbackManager
from agriportal.services.list_manager import ListManager
from agriportal.services.notifications import NotificationCenter
from agriportal.services.orders import OrderManager
from agriportal.services.realtime import RealtimeRelay


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Identity ---
    auth_service: AuthService

    # --- Infrastructure ---
    realtime: RealtimeRelay
    storage: StorageRepository

    # --- Entity lists ---
    announcements: ListManager[Announcement]
    activities: ListManager[Activity]
    bookings: ListManager[Booking]
    appointments: ListManager[Appointment]
    products: ListManager[Product]
    orders: OrderManager
    trainings: ListManager[Training]
    training_registrations: ListManager[TrainingRegistration]
    feedbacks: FeedbackManager
    notifications: NotificationCenter

    # --- Dashboard ---
    dashboard: DashboardService


def create_services(
    db: BackendManager,
    config: AppConfig,
    session: SessionManager,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to views as needed.

    Args:
        db: Backend connection (online or offline).
        config: Application configuration.
        session: The one identity holder every manager reads.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("agriportal.services")
    page_size = config.DEFAULT_PAGE_SIZE

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    storage = StorageRepository(db=db, config=config, logger=logger)
    product_repo = ProductRepository(db=db, logger=logger)
    activity_repo = ActivityRepository(db=db, logger=logger)
    carousel_repo = CarouselRepository(db=db, logger=logger)
    notification_repo = NotificationRepository(db=db, logger=logger)

    def table_repo(config_: entities.EntityConfig) -> EntityRepository:
        return EntityRepository(db=db, logger=logger, table=config_.table)

    # ------------------------------------------------------------------
    # 2. Infrastructure services
    # ------------------------------------------------------------------
    realtime = RealtimeRelay(db=db, logger=logger)
    auth_service = AuthService(db=db, session=session, config=config, logger=logger)

    def list_manager(
        config_: entities.EntityConfig,
        repo: Optional[EntityRepository] = None,
        size: int = page_size,
    ) -> ListManager:
        return ListManager(
            config=config_,
            repo=repo or table_repo(config_),
            session=session,
            logger=logger,
            storage=storage if config_.has_files else None,
            relay=realtime,
            page_size=size,
        )

    # ------------------------------------------------------------------
    # 3. Entity list managers
    # ------------------------------------------------------------------
    products = list_manager(entities.PRODUCTS, product_repo)
    orders = OrderManager(
        config=entities.ORDERS,
        repo=table_repo(entities.ORDERS),
        session=session,
        logger=logger,
        product_repo=product_repo,
        relay=realtime,
        page_size=page_size,
    )
    orders.attach_products(products)

    feedbacks = FeedbackManager(
        config=entities.FEEDBACKS,
        repo=table_repo(entities.FEEDBACKS),
        session=session,
        logger=logger,
        relay=realtime,
        page_size=page_size,
    )
    notifications = NotificationCenter(
        config=entities.NOTIFICATIONS,
        repo=notification_repo,
        session=session,
        logger=logger,
        relay=realtime,
        page_size=config.NOTIFICATIONS_PAGE_SIZE,
    )

    # ------------------------------------------------------------------
    # 4. Dashboard
    # ------------------------------------------------------------------
    carousel: ListManager[CarouselSlide] = list_manager(
        entities.CAROUSEL_SLIDES, carousel_repo, config.CAROUSEL_PAGE_SIZE,
    )
    dashboard = DashboardService(
        carousel=carousel,
        carousel_repo=carousel_repo,
        activity_repo=activity_repo,
        session=session,
        logger=logger,
        relay=realtime,
        activity_limit=config.DASHBOARD_ACTIVITY_LIMIT,
    )

    return ServiceContainer(
        auth_service=auth_service,
        realtime=realtime,
        storage=storage,
        announcements=list_manager(entities.ANNOUNCEMENTS),
        activities=list_manager(entities.ACTIVITIES, activity_repo),
        bookings=list_manager(entities.BOOKINGS),
        appointments=list_manager(entities.APPOINTMENTS),
        products=products,
        orders=orders,
        trainings=list_manager(entities.TRAININGS),
        training_registrations=list_manager(entities.TRAINING_REGISTRATIONS),
        feedbacks=feedbacks,
        notifications=notifications,
        dashboard=dashboard,
    )
