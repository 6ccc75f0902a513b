"""Sign-in, registration, session restore, and allow-list role resolution."""

import asyncio

import pytest

from agriportal.auth import SessionManager
from agriportal.models.auth_models import AuthErrorCode
from agriportal.models.enums import AuthState, UserType
from agriportal.services.auth_service import (
    ADMIN_REGISTRATION_MESSAGE,
    CONFIRM_EMAIL_MESSAGE,
    AuthService,
)

from tests.conftest import ADMIN_EMAIL


@pytest.fixture
def auth(db, session, config, logger) -> AuthService:
    return AuthService(db=db, session=session, config=config, logger=logger)


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "email, expected",
    [
        ("admin@farm.test", UserType.ADMIN),
        ("  Admin@Farm.TEST ", UserType.ADMIN),
        ("boss@farm.test", UserType.ADMIN),
        ("grower@farm.test", UserType.USER),
        ("", UserType.USER),
        (None, UserType.USER),
    ],
)
def test_role_comes_from_allow_list_only(auth, email, expected):
    assert auth.determine_user_type(email) == expected


def test_allow_list_is_parsed_case_insensitively(config):
    assert config.admin_emails == frozenset({"admin@farm.test", "boss@farm.test"})


def test_metadata_cannot_grant_admin(auth, client):
    user = client.auth.add_user("grower@farm.test", "secret1", full_name="Grower")
    user.user_metadata["user_type"] = "admin"

    identity = auth.build_identity(user)

    assert identity.user_type == UserType.USER


@pytest.mark.parametrize(
    "metadata, email, expected",
    [
        ({"full_name": "Jane Grower"}, "jane@farm.test", "Jane Grower"),
        ({}, "jane@farm.test", "jane"),
        ({}, "", "User"),
    ],
)
def test_full_name_fallbacks(auth, metadata, email, expected):
    from types import SimpleNamespace

    user = SimpleNamespace(id="u", email=email, user_metadata=metadata)
    assert auth.build_identity(user).full_name == expected


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------

def test_admin_sign_in_lands_on_admin_dashboard(auth, client, session):
    client.auth.add_user(ADMIN_EMAIL, "secret1", full_name="Ada Admin")

    result = asyncio.run(auth.sign_in(ADMIN_EMAIL, "secret1"))

    assert result.success
    assert result.redirect_to == "/admin/dashboard"
    assert result.user_type == UserType.ADMIN
    assert session.state == AuthState.AUTHENTICATED
    assert session.is_admin
    assert auth.can_access_admin()
    assert session.access_token.startswith("access-")
    assert not session.is_token_expired


def test_user_sign_in_normalises_email(auth, client, session):
    client.auth.add_user("grower@farm.test", "secret1")

    result = asyncio.run(auth.sign_in(" Grower@Farm.test ", "secret1"))

    assert result.success
    assert result.redirect_to == "/user/dashboard"
    assert result.full_name == "grower"
    assert auth.get_user_role() == UserType.USER
    assert auth.can_access_user()
    assert not auth.is_user_admin()


def test_wrong_password_reports_provider_message(auth, client, session):
    client.auth.add_user("grower@farm.test", "secret1")

    result = asyncio.run(auth.sign_in("grower@farm.test", "nope-nope"))

    assert not result.success
    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert result.error_message == "Invalid login credentials"
    assert not session.is_authenticated


def test_malformed_email_fails_validation(auth):
    result = asyncio.run(auth.sign_in("not-an-email", "secret1"))

    assert result.error_code == AuthErrorCode.VALIDATION_ERROR


def test_network_failure_is_classified(auth, client, monkeypatch):
    async def unreachable(credentials):
        raise ConnectionError("Network is unreachable")

    monkeypatch.setattr(client.auth, "sign_in_with_password", unreachable)

    result = asyncio.run(auth.sign_in("grower@farm.test", "secret1"))

    assert result.error_code == AuthErrorCode.NETWORK_ERROR
    assert result.error_message == "Network is unreachable"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_allow_listed_address_cannot_register(auth, client):
    result = asyncio.run(auth.sign_up("Admin@farm.test", "secret1", "Eve"))

    assert not result.success
    assert result.error_code == AuthErrorCode.ADMIN_REGISTRATION
    assert result.error_message == ADMIN_REGISTRATION_MESSAGE
    assert client.auth.sign_up_calls == []


def test_sign_up_awaiting_confirmation(auth, client, session):
    client.auth.require_confirmation = True

    result = asyncio.run(auth.sign_up("new@farm.test", "secret1", "  Sam Farmer "))

    assert result.success
    assert result.requires_confirmation
    assert result.message == CONFIRM_EMAIL_MESSAGE
    assert not session.is_authenticated
    assert client.auth.sign_up_calls[0]["options"]["data"]["full_name"] == "Sam Farmer"


def test_sign_up_with_immediate_session_signs_in(auth, client, session):
    result = asyncio.run(auth.sign_up("new@farm.test", "secret1", "Sam Farmer"))

    assert result.success
    assert not result.requires_confirmation
    assert result.redirect_to == "/user/dashboard"
    assert session.full_name == "Sam Farmer"
    assert session.user_type == UserType.USER


def test_sign_up_short_password(auth, client):
    result = asyncio.run(auth.sign_up("new@farm.test", "12345", "Sam"))

    assert result.error_code == AuthErrorCode.VALIDATION_ERROR
    assert client.auth.sign_up_calls == []


def test_sign_up_existing_address(auth, client):
    client.auth.add_user("taken@farm.test", "secret1")

    result = asyncio.run(auth.sign_up("taken@farm.test", "secret1", "Sam"))

    assert result.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------

def test_initialize_restores_persisted_session(auth, client, session):
    user = client.auth.add_user(ADMIN_EMAIL, "secret1", full_name="Ada Admin")
    client.auth.session = client.auth.make_session(user)

    identity = asyncio.run(auth.initialize())

    assert identity.full_name == "Ada Admin"
    assert session.is_ready
    assert session.is_admin


def test_initialize_without_session_is_anonymous(auth, session):
    assert asyncio.run(auth.initialize()) is None
    assert session.state == AuthState.ANONYMOUS
    assert session.is_ready


def test_initialize_failure_is_anonymous(auth, client, session):
    client.auth.fail_get_session = True

    assert asyncio.run(auth.initialize()) is None
    assert session.state == AuthState.ANONYMOUS


def test_sign_out_clears_identity(auth, client, session):
    client.auth.add_user("grower@farm.test", "secret1")
    asyncio.run(auth.sign_in("grower@farm.test", "secret1"))

    result = asyncio.run(auth.sign_out())

    assert result.success
    assert result.redirect_to == "/"
    assert session.state == AuthState.ANONYMOUS
    assert session.access_token is None


def test_failed_sign_out_keeps_identity(auth, client, session):
    client.auth.add_user("grower@farm.test", "secret1")
    asyncio.run(auth.sign_in("grower@farm.test", "secret1"))
    client.auth.fail_sign_out = True

    result = asyncio.run(auth.sign_out())

    assert not result.success
    assert result.error_message == "Network request failed"
    assert session.is_authenticated


def test_provider_events_are_mirrored(auth, client, session):
    user = client.auth.add_user("grower@farm.test", "secret1")
    auth.attach_listener()

    client.auth.emit("SIGNED_IN", client.auth.make_session(user))
    assert session.email == "grower@farm.test"

    refreshed = client.auth.make_session(user)
    refreshed.access_token = "rotated"
    client.auth.emit("TOKEN_REFRESHED", refreshed)
    assert session.access_token == "rotated"

    client.auth.emit("SIGNED_OUT", None)
    assert not session.is_authenticated


def test_session_manager_requires_sign_in_for_current_user():
    manager = SessionManager()

    assert manager.state == AuthState.UNINITIALIZED
    assert not manager.is_ready
    assert manager.is_token_expired
    with pytest.raises(RuntimeError):
        manager.get_current_user()
