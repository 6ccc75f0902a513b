"""Route guards: login redirects and admin/user subtree separation."""

import pytest

from agriportal.models.enums import RouteAccess
from agriportal.routing import default_routes

from tests.conftest import make_identity


@pytest.fixture
def routes(logger):
    return default_routes(logger)


@pytest.mark.parametrize("path", ["/", "/login", "/about", "/administrator"])
def test_public_and_unregistered_paths_are_open(routes, session, path):
    decision = routes.resolve(path, session)
    assert decision.allowed
    assert decision.redirect_to is None


def test_anonymous_visitor_is_sent_to_login_with_return_path(routes, session):
    decision = routes.resolve("/user/my orders", session)

    assert not decision.allowed
    assert decision.redirect_to == "/login?redirect=/user/my%20orders"


def test_user_is_kept_out_of_admin_area(routes, user_session):
    decision = routes.resolve("/admin/products", user_session)

    assert decision.redirect_to == "/user/dashboard"


def test_admin_is_kept_out_of_user_area(routes, admin_session):
    decision = routes.resolve("/user/dashboard", admin_session)

    assert decision.redirect_to == "/admin/dashboard"


def test_each_role_reaches_its_own_area(routes, session):
    session.set_identity(make_identity())
    assert routes.resolve("/user/orders", session).allowed

    session.set_identity(make_identity(user_id="a", email="admin@farm.test", admin=True))
    assert routes.resolve("/admin", session).allowed


def test_most_specific_prefix_wins(routes, session):
    routes.register("/admin/preview", "Preview", RouteAccess.PUBLIC)

    assert routes.match("/admin/preview/slides").prefix == "/admin/preview"
    assert routes.resolve("/admin/preview/slides", session).allowed
    assert not routes.resolve("/admin/products", session).allowed


def test_entries_by_access_level(routes):
    assert [e.prefix for e in routes.entries_for(RouteAccess.PUBLIC)] == ["/", "/login"]
    assert [e.display_name for e in routes.entries_for(RouteAccess.ADMIN)] == ["Admin Area"]
