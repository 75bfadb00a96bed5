"""
Course catalogue routes.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from teacha.api.middleware.auth import AUTHOR_ROLES, optional_auth, require_role
from teacha.api.schemas import CamelModel, CoursePublic, reject_null
from teacha.auth import Identity
from teacha.database.connection import get_db
from teacha.database.models import Course, CourseStatus, Tenant
from teacha.services import course_service
from teacha.services.tenant_service import resolve_tenant
from teacha.utils.exceptions import ConflictError, NotFoundError, ValidationError
from teacha.utils.logger import get_logger
from teacha.utils.transaction import transaction_scope

logger = get_logger(__name__)

router = APIRouter()

COURSE_SLUG_PATTERN = r"^[a-z0-9-]+$"


class CourseCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=100, pattern=COURSE_SLUG_PATTERN)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    status: CourseStatus = CourseStatus.DRAFT


class CourseUpdateRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=COURSE_SLUG_PATTERN)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    status: Optional[CourseStatus] = None

    @field_validator("title", "slug", "price", "status", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


def _slug_taken(db: Session, tenant_id: UUID, slug: str, exclude_id: Optional[UUID] = None) -> bool:
    query = db.query(Course.id).filter(Course.tenant_id == tenant_id, Course.slug == slug)
    if exclude_id is not None:
        query = query.filter(Course.id != exclude_id)
    return query.first() is not None


@router.get("")
async def list_courses(
    tenant: Optional[str] = Query(None, description="Tenant slug, required for anonymous callers"),
    course_status: Optional[CourseStatus] = Query(None, alias="status"),
    identity: Optional[Identity] = Depends(optional_auth),
    db: Session = Depends(get_db)
):
    """
    List courses of a tenant.

    Members list every course of their tenant; anyone else lists the
    published courses of the tenant named by ``?tenant=<slug>``.
    """
    if tenant is not None:
        target = db.query(Tenant).filter(Tenant.slug == tenant).first()
        if target is None:
            raise NotFoundError("Tenant")
    elif identity is not None and identity.tenant_id is not None:
        target = resolve_tenant(db, identity)
    else:
        raise ValidationError("Tenant is required", field="tenant")

    query = db.query(Course).filter(Course.tenant_id == target.id)
    if not course_service.is_member(identity, target.id):
        query = query.filter(Course.status == CourseStatus.PUBLISHED)
    elif course_status is not None:
        query = query.filter(Course.status == course_status)

    courses = query.order_by(Course.created_at).all()
    return {"courses": [CoursePublic.from_course(course) for course in courses]}


@router.get("/{course_id}")
async def get_course(
    course_id: UUID,
    identity: Optional[Identity] = Depends(optional_auth),
    db: Session = Depends(get_db)
):
    """Get a course with its lessons."""
    course = course_service.get_readable_course(db, identity, course_id)
    return {"course": CoursePublic.from_course(course, with_lessons=True)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreateRequest,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    """
    Create a course in the caller's tenant.

    Requires INSTRUCTOR, TENANT_OWNER or ADMIN role. Slugs are unique per tenant.
    """
    tenant = resolve_tenant(db, identity)
    if _slug_taken(db, tenant.id, data.slug):
        raise ConflictError(course_service.COURSE_SLUG_TAKEN)

    with transaction_scope(db, conflict_message=course_service.COURSE_SLUG_TAKEN):
        course = Course(
            tenant_id=tenant.id,
            title=data.title,
            slug=data.slug,
            description=data.description,
            price=data.price,
            status=data.status,
        )
        db.add(course)
    db.refresh(course)

    logger.info(f"Course created: {course.slug} ({course.id}) in tenant {tenant.slug}")
    return {"message": "Course created successfully", "course": CoursePublic.from_course(course)}


@router.put("/{course_id}")
async def update_course(
    course_id: UUID,
    data: CourseUpdateRequest,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    """Update a course of the caller's tenant."""
    course = course_service.get_tenant_course(db, identity, course_id)

    if data.slug is not None and _slug_taken(db, course.tenant_id, data.slug, exclude_id=course.id):
        raise ConflictError(course_service.COURSE_SLUG_TAKEN)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(course, field, value)

    with transaction_scope(db, conflict_message=course_service.COURSE_SLUG_TAKEN):
        db.add(course)
    db.refresh(course)

    logger.info(f"Course updated: {course.id} by {identity.user_id}")
    return {"message": "Course updated successfully", "course": CoursePublic.from_course(course)}


@router.delete("/{course_id}")
async def delete_course(
    course_id: UUID,
    identity: Identity = Depends(require_role(AUTHOR_ROLES)),
    db: Session = Depends(get_db)
):
    """Delete a course with its lessons and enrollments."""
    course = course_service.get_tenant_course(db, identity, course_id)

    with transaction_scope(db):
        db.delete(course)

    logger.info(f"Course deleted: {course_id} by {identity.user_id}")
    return {"message": "Course deleted successfully"}
