"""Formatters, PostgREST filter helpers, storage paths, config, and logging."""

import json
import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from agriportal.config import AppConfig
from agriportal.models.enums import OrderStatus
from agriportal.repositories.storage_repository import (
    generate_object_path,
    path_from_public_url,
)
from agriportal.utils.audit import log_audit_event
from agriportal.utils.formatters import (
    format_date,
    format_date_short,
    format_datetime,
    format_time,
    status_label,
    time_ago,
)
from agriportal.utils.general import convert_to_json_safe, error_message
from agriportal.utils.string_helpers import (
    build_or_filter,
    build_search_filter,
    escape_like,
    quote_postgrest_value,
)

from tests.conftest import make_file


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

def test_date_and_time_formats():
    assert format_date("2024-01-01T10:00:00Z") == "January 1, 2024"
    assert format_time("14:30:00") == "2:30 PM"
    assert format_time("00:05") == "12:05 AM"
    assert format_datetime("2024-01-01T14:30:00") == "January 1, 2024, 2:30 PM"
    assert format_date_short("2024-03-07") == "03/07/2024"


@pytest.mark.parametrize("formatter", [format_date, format_time, format_datetime, format_date_short])
def test_empty_values_are_not_available(formatter):
    assert formatter("") == "N/A"
    assert formatter(None) == "N/A"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-06-01T11:59:30Z", "Just now"),
        ("2024-06-01T11:59:00Z", "1 minute ago"),
        ("2024-06-01T09:00:00Z", "3 hours ago"),
        ("2024-05-31T12:00:00", "1 day ago"),
        ("2024-05-18T12:00:00Z", "2 weeks ago"),
    ],
)
def test_time_ago(value, expected):
    now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    assert time_ago(value, now=now) == expected


def test_status_label():
    assert status_label("PENDING") == "Pending"
    assert status_label(OrderStatus.COMPLETED) == "Completed"


# ---------------------------------------------------------------------------
# PostgREST filters
# ---------------------------------------------------------------------------

def test_like_escaping_and_quoting():
    assert escape_like("50%_off*") == "50\\%\\_off_"
    assert escape_like("Farmer's & Co.") == "Farmer's & Co."
    assert quote_postgrest_value('say "hi", (now)\\') == '"say \\"hi\\", (now)\\\\"'


def test_search_filter_spans_fields():
    assert build_search_filter(["name", "category"], "Rice") == (
        'name.ilike."%Rice%",category.ilike."%Rice%"'
    )


def test_search_filter_keeps_reserved_characters_inside_quotes():
    assert build_search_filter(["name"], " Grain, (bulk) ") == 'name.ilike."%Grain, (bulk)%"'


@pytest.mark.parametrize("fields, query", [(["name"], ""), (["name"], "   "), ([], "rice")])
def test_search_filter_absent_when_nothing_to_match(fields, query):
    assert build_search_filter(fields, query) is None


def test_or_filter_renders_booleans_lowercase():
    assert build_or_filter([("is_public", "eq", True), ("user_id", "eq", "u-1")]) == (
        "is_public.eq.true,user_id.eq.u-1"
    )


# ---------------------------------------------------------------------------
# Storage paths
# ---------------------------------------------------------------------------

def test_object_path_is_random_and_keeps_extension():
    first = generate_object_path(make_file("harvest.JPG"))
    second = generate_object_path(make_file("harvest.JPG"))

    assert re.fullmatch(r"[0-9a-f]{12}-\d+\.JPG", first)
    assert first != second


def test_path_from_public_url():
    url = "https://x.supabase.co/storage/v1/object/public/products/abc-1.png"

    assert path_from_public_url(url, "products") == "abc-1.png"
    assert path_from_public_url(url, "carousel") is None


# ---------------------------------------------------------------------------
# General helpers
# ---------------------------------------------------------------------------

class _ApiError(Exception):
    def __init__(self, message):
        super().__init__("code 23505")
        self.message = message


def test_error_message_prefers_backend_message():
    assert error_message(_ApiError("duplicate key value")) == "duplicate key value"
    assert error_message(_ApiError("")) == "code 23505"
    assert error_message(ValueError("bad")) == "bad"
    assert error_message(RuntimeError()) == "RuntimeError"


def test_convert_to_json_safe():
    converted = convert_to_json_safe({
        "when": datetime(2024, 1, 1, 8, 30),
        "day": date(2024, 1, 2),
        "price": Decimal("1.50"),
        "status": OrderStatus.PENDING,
        "bad": math.nan,
        "tags": ("a", 1),
        "roles": {"user", "admin"},
    })

    assert converted == {
        "when": "2024-01-01T08:30:00",
        "day": "2024-01-02",
        "price": 1.5,
        "status": "pending",
        "bad": None,
        "tags": ["a", 1],
        "roles": ["admin", "user"],
    }


# ---------------------------------------------------------------------------
# Config and logging
# ---------------------------------------------------------------------------

def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "25")
    monkeypatch.setenv("ADMIN_EMAILS", "Root@Farm.test")

    config = AppConfig(_env_file=None)

    assert config.DEFAULT_PAGE_SIZE == 25
    assert config.admin_emails == frozenset({"root@farm.test"})
    assert config.STORAGE_CACHE_CONTROL == "3600"


def _last_entry(stream):
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_audit_events_are_structured_json(logger, log_stream):
    log_audit_event(logger, "CREATE", "products", 7, None, details={"fields": "name"})

    entry = _last_entry(log_stream)
    assert entry["level"] == "INFO"
    assert entry["message"].startswith("AUDIT: ")
    audit = json.loads(entry["message"][len("AUDIT: "):])
    assert audit["entity_id"] == "7"
    assert audit["user_id"] == "anonymous"
    assert audit["details"] == {"fields": "name"}


def test_log_extra_fields_are_kept(logger, log_stream):
    logger.info("Products fetched", extra={"count": 10, "tables": ("products",)})

    entry = _last_entry(log_stream)
    assert entry["message"] == "Products fetched"
    assert entry["extra"] == {"count": 10, "tables": ["products"]}
    assert "task" not in entry


def test_bound_context_merges_into_extra(logger, log_stream):
    bound = logger.bind(table="products", page=1)
    bound.warning("Slow fetch", extra={"page": 2})

    entry = _last_entry(log_stream)
    assert entry["level"] == "WARNING"
    assert entry["extra"] == {"table": "products", "page": 2}
    assert logger.context == {}
