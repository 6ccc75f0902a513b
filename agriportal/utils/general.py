"""Helpers shared by the repositories, services and the logger."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel

__all__ = ["JsonSafeType", "convert_to_json_safe", "error_message"]


JsonSafeType = Union[
    None,
    str,
    int,
    bool,
    float,
    Dict[str, "JsonSafeType"],
    List["JsonSafeType"],
]


def convert_to_json_safe(data: Any) -> JsonSafeType:
    """Reduce row payloads, log extras and audit events to plain JSON values.

    Enums collapse to their value, temporal values to ISO strings and
    ``Decimal`` to ``float``.  Non-finite floats become ``None``.  Models are
    dumped in JSON mode; sets become sorted lists so output is stable.
    """
    if data is None or isinstance(data, (str, bool)):
        return data

    # StrEnum/IntEnum members are also str/int instances.
    if isinstance(data, Enum):
        return convert_to_json_safe(data.value)

    if isinstance(data, int):
        return data

    if isinstance(data, (float, Decimal)):
        number = float(data)
        return number if math.isfinite(number) else None

    if isinstance(data, (date, time)):
        return data.isoformat()

    if isinstance(data, BaseModel):
        return convert_to_json_safe(data.model_dump(mode="json"))

    if isinstance(data, Mapping):
        return {str(key): convert_to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (set, frozenset)):
        return sorted((convert_to_json_safe(item) for item in data), key=str)

    if isinstance(data, (list, tuple)):
        return [convert_to_json_safe(item) for item in data]

    return str(data)


def error_message(exc: BaseException) -> str:
    """Flatten any backend, storage, or validation error to its message text.

    PostgREST and storage errors carry a ``message`` attribute; everything
    else falls back to ``str(exc)``, and finally to the class name.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__
