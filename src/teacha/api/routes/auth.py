"""
Authentication routes for registration, login and the caller's profile.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from teacha.api.middleware.auth import require_auth
from teacha.api.schemas import CamelModel, UserPublic
from teacha.auth import Identity, hash_password, issue_token, verify_password
from teacha.database.connection import get_db
from teacha.database.models import User, UserRole
from teacha.monitoring.prometheus_metrics import get_metrics
from teacha.services.user_service import create_user, get_user_by_email
from teacha.utils.exceptions import AuthenticationError, NotFoundError, ValidationError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"
PRIVILEGED_ROLE = "This role cannot be chosen at registration"

# Tenant owners come from tenant signup, administrators from POST /users or the CLI
SELF_ASSIGNABLE_ROLES = (UserRole.STUDENT, UserRole.INSTRUCTOR)


# Request models
class RegisterRequest(CamelModel):
    """User registration request."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    tenant_id: Optional[UUID] = None
    role: Optional[UserRole] = None


class LoginRequest(CamelModel):
    """User login request."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(CamelModel):
    """Profile update. Changing the password requires the current one."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=6)
    current_password: Optional[str] = None


def _load_user(db: Session, identity: Identity) -> User:
    user = db.get(User, identity.user_uuid)
    if user is None:
        raise NotFoundError("User")
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a user and issue an access token.

    The role defaults to STUDENT. Only STUDENT and INSTRUCTOR may be chosen
    here, so a registration never yields a tenant owner or an administrator.
    """
    role = data.role or UserRole.STUDENT
    if role not in SELF_ASSIGNABLE_ROLES:
        logger.warning(f"Registration of {data.email} as {role.value} refused")
        raise ValidationError(PRIVILEGED_ROLE, field="role")

    password_hash = await run_in_threadpool(hash_password, data.password)

    user = create_user(
        db,
        name=data.name,
        email=data.email,
        password_hash=password_hash,
        role=role,
        tenant_id=data.tenant_id,
    )
    get_metrics().track_registration(user.role.value)

    return {
        "message": "User registered successfully",
        "user": UserPublic.from_user(user),
        "token": issue_token(Identity.for_user(user)),
    }


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return a token.

    Unknown email and wrong password answer with the same error.
    """
    user = get_user_by_email(db, data.email)

    password_ok = user is not None and await run_in_threadpool(
        verify_password, data.password, user.password_hash
    )
    if not password_ok:
        logger.warning(f"Failed login attempt for {data.email}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info(f"User logged in: {user.email}")

    return {
        "message": "Login successful",
        "user": UserPublic.from_user(user),
        "token": issue_token(Identity.for_user(user)),
    }


@router.get("/me")
async def get_profile(
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Get the authenticated user's profile."""
    return {"user": UserPublic.from_user(_load_user(db, identity))}


@router.patch("/me")
async def update_profile(
    data: ProfileUpdateRequest,
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Update the authenticated user's name and/or password."""
    user = _load_user(db, identity)

    if data.password is not None:
        if not data.current_password:
            raise ValidationError("Current password is required", field="currentPassword")
        if not await run_in_threadpool(verify_password, data.current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        user.password_hash = await run_in_threadpool(hash_password, data.password)

    if data.name is not None:
        user.name = data.name

    with transaction_scope(db):
        db.add(user)
    db.refresh(user)

    logger.info(f"Profile updated: {user.email}")
    return {"message": "Profile updated successfully", "user": UserPublic.from_user(user)}
