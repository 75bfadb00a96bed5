"""
Tenant routes: signup, slug availability and the caller's tenant.
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import AnyHttpUrl, EmailStr, Field
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from teacha.api.middleware.auth import MANAGER_ROLES, require_auth, require_role
from teacha.api.schemas import CamelModel, TenantPublic, TenantSummary, UserPublic
from teacha.auth import Identity, hash_password, issue_token
from teacha.database.connection import get_db
from teacha.database.models import TenantPlan
from teacha.monitoring.prometheus_metrics import get_metrics
from teacha.services import tenant_service
from teacha.services.tenant_settings import TenantSettings
from teacha.utils.exceptions import ValidationError
from teacha.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

SLUG_PATTERN = r"^[a-z0-9-]+$"
_SLUG_RE = re.compile(SLUG_PATTERN)


def _url_text(url: Optional[AnyHttpUrl]) -> Optional[str]:
    return str(url).rstrip("/") if url is not None else None


# Request models
class TenantSignupRequest(CamelModel):
    """Tenant signup: the tenant and its owner account."""
    tenant_name: str = Field(..., min_length=2, max_length=255)
    tenant_slug: str = Field(..., min_length=3, max_length=50, pattern=SLUG_PATTERN,
                             description="Lowercase letters, numbers and hyphens")
    domain: Optional[AnyHttpUrl] = None
    owner_name: str = Field(..., min_length=2, max_length=255)
    owner_email: EmailStr
    password: str = Field(..., min_length=8, description="Password (min 8 characters)")
    plan: TenantPlan = TenantPlan.FREE


class CheckSlugRequest(CamelModel):
    slug: str


class TenantUpdateRequest(CamelModel):
    """Partial tenant update. ``settings`` sections are merged into the stored ones."""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    domain: Optional[AnyHttpUrl] = None
    settings: Optional[TenantSettings] = None


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    data: TenantSignupRequest,
    db: Session = Depends(get_db)
):
    """
    Register a new tenant with its owner.

    Creates the tenant and a TENANT_OWNER user atomically and issues the
    owner's token.
    """
    password_hash = await run_in_threadpool(hash_password, data.password)

    tenant, owner = tenant_service.signup_tenant(
        db,
        name=data.tenant_name,
        slug=data.tenant_slug,
        domain=_url_text(data.domain),
        plan=data.plan,
        owner_name=data.owner_name,
        owner_email=data.owner_email,
        password_hash=password_hash,
    )
    get_metrics().track_signup(tenant.plan.value)

    return {
        "message": "Tenant registered successfully",
        "tenant": TenantSummary.from_tenant(tenant),
        "owner": UserPublic.from_user(owner),
        "token": issue_token(Identity.for_user(owner)),
        **tenant_service.tenant_urls(tenant),
    }


@router.post("/check-slug")
async def check_slug(
    data: CheckSlugRequest,
    db: Session = Depends(get_db)
):
    """Check whether a slug is free; suggests an alternative when it is taken."""
    slug = data.slug
    if not 3 <= len(slug) <= 50 or not _SLUG_RE.match(slug):
        raise ValidationError("Invalid slug format")

    return tenant_service.check_slug(db, slug)


@router.get("/current")
async def get_current_tenant(
    identity: Identity = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Get the caller's tenant with member and course statistics."""
    tenant = tenant_service.resolve_tenant(db, identity)

    return {
        "tenant": TenantPublic.from_tenant(tenant),
        "stats": tenant_service.tenant_stats(tenant),
    }


@router.put("/current")
async def update_current_tenant(
    data: TenantUpdateRequest,
    identity: Identity = Depends(require_role(MANAGER_ROLES)),
    db: Session = Depends(get_db)
):
    """
    Update the caller's tenant.

    Requires TENANT_OWNER or ADMIN role.
    """
    tenant = tenant_service.resolve_tenant(db, identity)

    tenant = tenant_service.update_tenant(
        db,
        tenant,
        name=data.name,
        domain=_url_text(data.domain),
        settings_patch=data.settings,
    )

    return {"message": "Tenant updated successfully", "tenant": TenantPublic.from_tenant(tenant)}
