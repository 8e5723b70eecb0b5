"""
Core Utilities

Shared helpers used across the application.
"""
import uuid
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Opaque identifier for new records."""
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    """Check that a path/claim value is a well-formed record identifier."""
    try:
        return str(uuid.UUID(str(value))) == str(value).lower()
    except (ValueError, TypeError, AttributeError):
        return False
