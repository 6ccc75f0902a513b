"""
Shared fixtures for the AgriPortal test suite.

Every test runs against ``tests.fakes.FakeSupabase`` wrapped in a real
``BackendManager``, so repositories, managers, and services execute
unmodified.
"""

import io
import os
import tempfile
from typing import Callable, Optional

import pytest

# Keep the rotating file handler out of the working tree.
os.environ.setdefault(
    "LOG_FILE", os.path.join(tempfile.gettempdir(), "agriportal-tests.log")
)

from agriportal.auth import SessionManager  # noqa: E402
from agriportal.config import AppConfig  # noqa: E402
from agriportal.database import BackendManager  # noqa: E402
from agriportal.entities import EntityConfig  # noqa: E402
from agriportal.logger import StructuredLogger  # noqa: E402
from agriportal.models.enums import UserType  # noqa: E402
from agriportal.models.file_models import UploadFile  # noqa: E402
from agriportal.models.user import Identity  # noqa: E402
from agriportal.repositories.base_repository import EntityRepository  # noqa: E402
from agriportal.repositories.storage_repository import StorageRepository  # noqa: E402
from agriportal.services.list_manager import ListManager  # noqa: E402
from agriportal.services.realtime import RealtimeRelay  # noqa: E402

from tests.fakes import FakeSupabase  # noqa: E402

ADMIN_EMAIL = "admin@farm.test"


def make_identity(
    user_id: str = "user-1",
    email: str = "grower@farm.test",
    full_name: str = "Jane Grower",
    admin: bool = False,
) -> Identity:
    return Identity(
        id=user_id,
        email=email,
        full_name=full_name,
        user_type=UserType.ADMIN if admin else UserType.USER,
    )


def make_file(name: str = "photo.png", size: int = 16, content_type: str = "image/png") -> UploadFile:
    return UploadFile(name=name, content=b"x" * size, content_type=content_type)


@pytest.fixture(scope="session")
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture(scope="session")
def logger(tmp_path_factory, log_stream) -> StructuredLogger:
    """One JSON logger for the whole run, writing to a temp file."""
    log_file = tmp_path_factory.mktemp("logs") / "agriportal-test.log"
    return StructuredLogger(name="agriportal.tests", stream=log_stream, log_file=str(log_file))


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        SUPABASE_URL="https://fake.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        ADMIN_EMAILS=f" {ADMIN_EMAIL.upper()} , boss@farm.test",
        _env_file=None,
    )


@pytest.fixture
def client() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(client, logger) -> BackendManager:
    return BackendManager(client=client, logger=logger)


@pytest.fixture
def session() -> SessionManager:
    return SessionManager()


@pytest.fixture
def user_session(session) -> SessionManager:
    session.set_identity(make_identity())
    return session


@pytest.fixture
def admin_session(session) -> SessionManager:
    session.set_identity(
        make_identity(user_id="admin-1", email=ADMIN_EMAIL, full_name="Ada Admin", admin=True)
    )
    return session


@pytest.fixture
def storage(db, config, logger) -> StorageRepository:
    return StorageRepository(db=db, config=config, logger=logger)


@pytest.fixture
def relay(db, logger) -> RealtimeRelay:
    return RealtimeRelay(db=db, logger=logger)


@pytest.fixture
def make_manager(db, logger, storage, relay) -> Callable[..., ListManager]:
    """Factory: ``make_manager(entity_config, session, page_size=10)``."""

    def _make(
        entity: EntityConfig,
        session: SessionManager,
        page_size: int = 10,
        repo: Optional[EntityRepository] = None,
    ) -> ListManager:
        return ListManager(
            config=entity,
            repo=repo or EntityRepository(db=db, logger=logger, table=entity.table),
            session=session,
            logger=logger,
            storage=storage,
            relay=relay,
            page_size=page_size,
        )

    return _make
