"""
User account creation shared by registration, tenant user management and the CLI.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from teacha.database.models import Tenant, User, UserRole
from teacha.utils.exceptions import ConflictError, NotFoundError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

EMAIL_TAKEN = "User with this email already exists"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password_hash: str,
    role: UserRole = UserRole.STUDENT,
    tenant_id: Optional[UUID] = None,
) -> User:
    """
    Persist a new user.

    The email lookup only produces the friendly error early; the unique index
    on ``users.email`` decides when two requests race.

    Raises:
        ConflictError: Email already registered
        NotFoundError: ``tenant_id`` does not reference a tenant
    """
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ConflictError(EMAIL_TAKEN)

    if tenant_id is not None and db.get(Tenant, tenant_id) is None:
        raise NotFoundError("Tenant")

    with transaction_scope(db, conflict_message=EMAIL_TAKEN):
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            tenant_id=tenant_id,
        )
        db.add(user)

    db.refresh(user)
    logger.info(f"User created: {user.email} ({user.role.value}, tenant={user.tenant_id})")
    return user
