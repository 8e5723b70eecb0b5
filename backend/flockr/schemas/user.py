"""
User schemas
"""
from datetime import datetime
from typing import Optional

from flockr.schemas.base import CamelModel


class UserResponse(CamelModel):
    """Public user fields. Never includes the password hash or tokens."""
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OwnerSummary(CamelModel):
    """Owner as shown on product listings."""
    id: str
    first_name: str
    last_name: str
    email: str
