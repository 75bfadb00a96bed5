"""
Declarative base shared by all models.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current time used for column defaults."""
    return datetime.now(timezone.utc)


def enum_values(enum_cls):
    """Persist enum values (``"free"``) instead of member names (``"FREE"``)."""
    return [member.value for member in enum_cls]
