"""
Identity Model.

The signed-in person as the portal sees them.  Built from the provider
session's user object plus the admin allow-list; never stored on its own.
"""

from __future__ import annotations

from pydantic import BaseModel

from agriportal.models.enums import UserType


class Identity(BaseModel):
    """Represents the authenticated user.

    ``full_name`` falls back to the e-mail local part (or ``"User"``) when
    the provider metadata carries no name.
    """

    id: str  # Supabase UUID
    email: str
    full_name: str
    user_type: UserType

    model_config = {"from_attributes": True, "frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN
