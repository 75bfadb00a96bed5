"""
Tenant signup and tenant read models.
"""

import random
from typing import Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teacha.database.models import CourseStatus, Tenant, TenantPlan, User, UserRole
from teacha.auth import Identity
from teacha.services.tenant_settings import (
    TenantSettings, default_settings, dump_settings, load_settings, merge_settings
)
from teacha.services.user_service import get_user_by_email, normalize_email
from teacha.utils.config import get_settings
from teacha.utils.exceptions import ConflictError, NotFoundError, ValidationError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

SLUG_TAKEN = "Slug is already taken. Please choose a different one."
EMAIL_TAKEN = "Email is already registered. Please use a different email."
DOMAIN_TAKEN = "Domain is already in use. Please use a different domain."
NO_TENANT = "User is not associated with a tenant"


def is_slug_available(db: Session, slug: str) -> bool:
    return db.query(Tenant.id).filter(Tenant.slug == slug).first() is None


def check_slug(db: Session, slug: str) -> Dict[str, Optional[object]]:
    """
    Report whether a slug is free.

    The suggestion for a taken slug is not checked itself; callers re-check.
    """
    available = is_slug_available(db, slug)
    return {
        "available": available,
        "slug": slug,
        "suggestion": None if available else f"{slug}-{random.randint(0, 999)}",
    }


def tenant_urls(tenant: Tenant) -> Dict[str, str]:
    """Dashboard and public URLs derived from the tenant slug."""
    base = f"https://{tenant.slug}.{get_settings().public_base_domain}"
    return {
        "dashboardUrl": f"{base}/dashboard",
        "publicUrl": tenant.domain or base,
    }


def _conflict_message(error: IntegrityError) -> str:
    text = str(error.orig).lower()
    if "email" in text:
        return EMAIL_TAKEN
    if "domain" in text:
        return DOMAIN_TAKEN
    return SLUG_TAKEN


def _create_owner(db: Session, tenant: Tenant, name: str, email: str, password_hash: str) -> User:
    owner = User(
        tenant_id=tenant.id,
        name=name,
        email=email,
        password_hash=password_hash,
        role=UserRole.TENANT_OWNER,
    )
    db.add(owner)
    db.flush()
    return owner


def signup_tenant(
    db: Session,
    *,
    name: str,
    slug: str,
    owner_name: str,
    owner_email: str,
    password_hash: str,
    plan: TenantPlan = TenantPlan.FREE,
    domain: Optional[str] = None,
) -> Tuple[Tenant, User]:
    """
    Create a tenant and its owner in one transaction.

    Either both rows are committed or neither is.

    Raises:
        ConflictError: Slug, domain or owner email already in use
    """
    owner_email = normalize_email(owner_email)

    if not is_slug_available(db, slug):
        raise ConflictError(SLUG_TAKEN)
    if get_user_by_email(db, owner_email):
        raise ConflictError(EMAIL_TAKEN)
    if domain and db.query(Tenant.id).filter(Tenant.domain == domain).first():
        raise ConflictError(DOMAIN_TAKEN)

    try:
        with transaction_scope(db):
            tenant = Tenant(
                name=name,
                slug=slug,
                domain=domain or None,
                plan=plan,
                settings=dump_settings(default_settings(plan)),
            )
            db.add(tenant)
            db.flush()

            owner = _create_owner(db, tenant, owner_name, owner_email, password_hash)
    except IntegrityError as e:
        raise ConflictError(_conflict_message(e)) from e

    db.refresh(tenant)
    db.refresh(owner)
    logger.info(f"Tenant registered: {tenant.slug} ({tenant.id}), owner {owner.email}")
    return tenant, owner


def tenant_stats(tenant: Tenant) -> Dict[str, int]:
    """Member and course counts for the tenant dashboard."""
    return {
        "totalUsers": len(tenant.users),
        "totalCourses": len(tenant.courses),
        "totalStudents": sum(1 for user in tenant.users if user.role == UserRole.STUDENT),
        "publishedCourses": sum(1 for course in tenant.courses if course.status == CourseStatus.PUBLISHED),
    }


def resolve_tenant(db: Session, identity: Identity) -> Tenant:
    """
    Tenant of the caller.

    Taken from the token claims, or from the user row for tokens issued
    without a tenant.

    Raises:
        ValidationError: The caller belongs to no tenant
        NotFoundError: The tenant no longer exists
    """
    tenant_id = identity.tenant_uuid
    if tenant_id is None:
        user = db.get(User, identity.user_uuid)
        tenant_id = user.tenant_id if user else None
    if tenant_id is None:
        raise ValidationError(NO_TENANT)

    tenant = db.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


def update_tenant(
    db: Session,
    tenant: Tenant,
    *,
    name: Optional[str] = None,
    domain: Optional[str] = None,
    settings_patch: Optional[TenantSettings] = None,
) -> Tenant:
    """
    Apply an owner/admin update. Settings sections are merged, not replaced.

    Raises:
        ConflictError: The domain belongs to another tenant
    """
    if name is not None:
        tenant.name = name
    if domain is not None:
        tenant.domain = domain or None
    if settings_patch is not None:
        merged = merge_settings(load_settings(tenant.settings), settings_patch)
        tenant.settings = dump_settings(merged)

    with transaction_scope(db, conflict_message=DOMAIN_TAKEN):
        db.add(tenant)

    db.refresh(tenant)
    logger.info(f"Tenant updated: {tenant.slug} ({tenant.id})")
    return tenant
