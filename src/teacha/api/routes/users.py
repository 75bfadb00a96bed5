"""
Tenant-scoped user management.

Members see the users of their own tenant. Platform administrators (ADMIN
without a tenant) see every tenant.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from teacha.api.middleware.auth import MANAGER_ROLES, require_auth, require_role
from teacha.api.schemas import CamelModel, UserPublic
from teacha.auth import Identity, hash_password
from teacha.database.connection import get_db
from teacha.database.models import User, UserRole
from teacha.monitoring.prometheus_metrics import get_metrics
from teacha.services.tenant_service import NO_TENANT
from teacha.services.user_service import EMAIL_TAKEN, create_user, normalize_email
from teacha.utils.exceptions import AuthorizationError, NotFoundError, ValidationError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

router = APIRouter()

_MANAGER_ROLE_NAMES = {role.value for role in MANAGER_ROLES}


class UserCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.STUDENT
    tenant_id: Optional[UUID] = Field(None, description="Only used by platform administrators")


class UserUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None


def _can_see(identity: Identity, user: User) -> bool:
    if identity.is_platform_admin:
        return True
    return identity.tenant_id is not None and str(user.tenant_id) == identity.tenant_id


def _get_visible_user(db: Session, identity: Identity, user_id: UUID) -> User:
    user = db.get(User, user_id)
    # Users of other tenants are reported as missing
    if user is None or not _can_see(identity, user):
        raise NotFoundError("User")
    return user


def _is_manager_of(identity: Identity, user: User) -> bool:
    if identity.role not in _MANAGER_ROLE_NAMES:
        return False
    return identity.is_platform_admin or str(user.tenant_id) == identity.tenant_id


def _can_grant_ownership(identity: Identity) -> bool:
    """Only tenant owners and platform administrators hand out or take away ownership."""
    return identity.role == UserRole.TENANT_OWNER.value or identity.is_platform_admin


@router.get("")
async def list_users(
    role: Optional[UserRole] = None,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """List users of the caller's tenant, optionally filtered by role."""
    query = db.query(User)
    if not identity.is_platform_admin:
        if identity.tenant_id is None:
            raise ValidationError(NO_TENANT)
        query = query.filter(User.tenant_id == identity.tenant_uuid)
    if role is not None:
        query = query.filter(User.role == role)

    users = query.order_by(User.created_at).all()
    return {"users": [UserPublic.from_user(user) for user in users]}


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Get a user of the caller's tenant."""
    return {"user": UserPublic.from_user(_get_visible_user(db, identity, user_id))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant_user(
    data: UserCreateRequest,
    identity: Identity = Depends(require_role(MANAGER_ROLES)),
    db: Session = Depends(get_db)
):
    """
    Create a user in the caller's tenant.

    Requires TENANT_OWNER or ADMIN role. Only platform administrators may
    choose the tenant.
    """
    tenant_id = identity.tenant_uuid
    if tenant_id is None:
        tenant_id = data.tenant_id
    if tenant_id is None and data.role != UserRole.ADMIN:
        raise ValidationError(NO_TENANT)
    if data.role == UserRole.TENANT_OWNER and not _can_grant_ownership(identity):
        raise AuthorizationError()

    password_hash = await run_in_threadpool(hash_password, data.password)
    user = create_user(
        db,
        name=data.name,
        email=data.email,
        password_hash=password_hash,
        role=data.role,
        tenant_id=tenant_id,
    )
    get_metrics().track_registration(user.role.value)

    return {"message": "User created successfully", "user": UserPublic.from_user(user)}


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    data: UserUpdateRequest,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Update a user.

    Users may edit themselves; TENANT_OWNER and ADMIN may edit members of
    their tenant and are the only ones allowed to change roles. Granting or
    removing TENANT_OWNER is left to owners and platform administrators.
    """
    user = _get_visible_user(db, identity, user_id)
    is_self = str(user.id) == identity.user_id
    is_manager = _is_manager_of(identity, user)

    if not (is_self or is_manager):
        raise AuthorizationError()
    role_changed = data.role is not None and data.role != user.role
    if role_changed and not is_manager:
        raise AuthorizationError()
    if role_changed and UserRole.TENANT_OWNER in (data.role, user.role) \
            and not _can_grant_ownership(identity):
        raise AuthorizationError()

    if data.name is not None:
        user.name = data.name
    if data.email is not None:
        user.email = normalize_email(data.email)
    if data.role is not None:
        user.role = data.role
    if data.password is not None:
        user.password_hash = await run_in_threadpool(hash_password, data.password)

    with transaction_scope(db, conflict_message=EMAIL_TAKEN):
        db.add(user)
    db.refresh(user)

    logger.info(f"User {user.id} updated by {identity.user_id}")
    return {"message": "User updated successfully", "user": UserPublic.from_user(user)}


@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    identity: Identity = Depends(require_role(MANAGER_ROLES)),
    db: Session = Depends(get_db)
):
    """
    Delete a user of the caller's tenant.

    Requires TENANT_OWNER or ADMIN role. Callers cannot delete themselves.
    """
    user = _get_visible_user(db, identity, user_id)
    if str(user.id) == identity.user_id:
        raise ValidationError("You cannot delete your own account")
    if not _is_manager_of(identity, user):
        raise NotFoundError("User")

    with transaction_scope(db):
        db.delete(user)

    logger.info(f"User {user_id} deleted by {identity.user_id}")
    return {"message": "User deleted successfully"}
