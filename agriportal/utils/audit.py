"""
Structured Audit Logging Utility.

Every successful create, update, and delete is logged as a structured
JSON object.  Provides a Pydantic-validated model and a single function
for consistent audit trail entries.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from agriportal.logger import StructuredLogger
from agriportal.utils.general import convert_to_json_safe

__all__ = ["AuditEvent", "log_audit_event"]

# Scalar type permitted inside the ``details`` mapping.  Kept flat; nested
# structures should be modelled explicitly.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: str
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: Union[str, int],
    user_id: Optional[str],
    details: Optional[dict[str, DetailValue]] = None,
) -> None:
    """Log a structured JSON audit event.

    Args:
        logger: The logger instance to write to.
        action: What happened (e.g. ``"CREATE"``, ``"UPDATE"``,
            ``"DELETE"``, ``"MARK_READ"``).
        entity_type: Table affected (e.g. ``"products"``).
        entity_id: Primary key of the affected row.
        user_id: ID of the user who performed the action; ``"anonymous"``
            when nobody is signed in.
        details: Optional additional context.
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        user_id=user_id or "anonymous",
        details=details or {},
    )
    logger.info("AUDIT: %s", json.dumps(convert_to_json_safe(event)))
