"""
Transaction management utilities for database operations.

Provides a context manager for all-or-nothing writes with automatic rollback.
Unique-constraint violations are the source of truth for duplicate emails,
slugs and enrollments; the scope can translate them into ConflictError.
"""

from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teacha.utils.exceptions import ConflictError
from teacha.utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def transaction_scope(db: Session, auto_commit: bool = True, conflict_message: Optional[str] = None):
    """
    Context manager for database transactions with automatic rollback.

    Usage:
        with transaction_scope(db, conflict_message="Slug is already taken"):
            tenant = Tenant(name="Test", slug="test")
            db.add(tenant)
            # Commits on success, rolls back on error

    Args:
        db: SQLAlchemy session
        auto_commit: Whether to commit automatically (default: True)
        conflict_message: When set, an IntegrityError is re-raised as
            ConflictError with this message

    Yields:
        Session: Database session

    Raises:
        ConflictError: On unique-constraint violation when conflict_message is set
        Exception: Re-raises any other exception after rollback

    Note:
        Does NOT close the session - that's handled by the dependency injection system.
    """
    try:
        yield db
        if auto_commit:
            db.commit()
            logger.debug("Transaction committed successfully")
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Transaction rolled back on integrity error: {e.orig}")
        if conflict_message:
            raise ConflictError(conflict_message) from e
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise
