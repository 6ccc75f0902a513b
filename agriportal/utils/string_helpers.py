"""
String Helpers: PostgREST filter construction.

Single source of truth for turning user-typed search text into PostgREST
``or`` expressions.  Every search box in the portal flows through here.

Search text is never altered: reserved characters are quoted and escaped
so "Farmer's" or "Beans & Rice" match exactly what the user typed.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "escape_like",
    "quote_postgrest_value",
    "build_search_filter",
    "build_or_filter",
]

# LIKE metacharacters, escaped with the default backslash escape.
_LIKE_SPECIAL_RE: re.Pattern[str] = re.compile(r"([\\%_])")


def escape_like(value: str) -> str:
    """Escape *value* so it matches literally inside an ``ilike`` pattern.

    PostgREST rewrites ``*`` to ``%`` in like patterns, so a literal
    asterisk becomes the single-character wildcard ``_``, which still
    matches it.

    >>> escape_like("50%_off*")
    '50\\\\%\\\\_off_'
    """
    return _LIKE_SPECIAL_RE.sub(r"\\\1", value).replace("*", "_")


def quote_postgrest_value(value: str) -> str:
    """Double-quote *value* for a PostgREST filter.

    Inside quotes the reserved ``,.:()`` characters are literal; only
    ``\\`` and ``"`` need a backslash.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_search_filter(fields: Sequence[str], query: str) -> Optional[str]:
    """Build a case-insensitive substring match across *fields*, OR-combined.

    Returns ``None`` when there is nothing to search for (blank query or
    no fields).

    >>> build_search_filter(["name", "category"], "Rice")
    'name.ilike."%Rice%",category.ilike."%Rice%"'
    """
    term = query.strip()
    if not term or not fields:
        return None
    pattern = quote_postgrest_value(f"%{escape_like(term)}%")
    return ",".join(f"{field}.ilike.{pattern}" for field in fields)


def build_or_filter(conditions: Sequence[tuple[str, str, object]]) -> str:
    """Join ``(field, operator, value)`` triples into one PostgREST ``or``.

    Booleans are rendered lower-case, as PostgREST expects.
    """
    parts: list[str] = []
    for field, operator, value in conditions:
        rendered = str(value).lower() if isinstance(value, bool) else str(value)
        parts.append(f"{field}.{operator}.{rendered}")
    return ",".join(parts)
