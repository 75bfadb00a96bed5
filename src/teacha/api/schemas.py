"""
Pydantic schemas for API responses.

Field names are snake_case in Python and camelCase on the wire.
Request bodies live next to the routes that accept them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from teacha.database.models import (
    Course, CourseStatus, Enrollment, Lesson, Tenant, TenantPlan, TenantStatus, User, UserRole
)
from teacha.services.tenant_settings import load_settings, settings_to_dict


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def reject_null(value: Any) -> Any:
    """
    Before-validator for partial updates of NOT NULL columns.

    Omitting such a field leaves the column alone; sending null is an error.
    """
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# User schemas
class UserPublic(CamelModel):
    """User projection safe to return to clients (no password hash)."""
    id: UUID
    tenant_id: Optional[UUID] = None
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(
            id=user.id,
            tenant_id=user.tenant_id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


# Tenant schemas
class TenantSummary(CamelModel):
    """Tenant fields returned at signup."""
    id: UUID
    name: str
    slug: str
    domain: Optional[str] = None
    plan: TenantPlan

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "TenantSummary":
        return cls(id=tenant.id, name=tenant.name, slug=tenant.slug, domain=tenant.domain, plan=tenant.plan)


class TenantPublic(TenantSummary):
    """Tenant with decoded settings."""
    status: TenantStatus
    settings: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "TenantPublic":
        return cls(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            domain=tenant.domain,
            plan=tenant.plan,
            status=tenant.status,
            settings=settings_to_dict(load_settings(tenant.settings)),
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
        )


# Course schemas
class LessonPublic(CamelModel):
    id: UUID
    course_id: UUID
    title: str
    description: Optional[str] = None
    content: str
    video_url: Optional[str] = None
    order: int
    duration: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> "LessonPublic":
        return cls(
            id=lesson.id,
            course_id=lesson.course_id,
            title=lesson.title,
            description=lesson.description,
            content=lesson.content or "",
            video_url=lesson.video_url,
            order=lesson.order,
            duration=lesson.duration,
            created_at=lesson.created_at,
            updated_at=lesson.updated_at,
        )


class CoursePublic(CamelModel):
    id: UUID
    tenant_id: UUID
    title: str
    description: Optional[str] = None
    slug: str
    price: float
    status: CourseStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lessons: Optional[List[LessonPublic]] = None

    @classmethod
    def from_course(cls, course: Course, with_lessons: bool = False) -> "CoursePublic":
        return cls(
            id=course.id,
            tenant_id=course.tenant_id,
            title=course.title,
            description=course.description,
            slug=course.slug,
            price=float(course.price or 0),
            status=course.status,
            created_at=course.created_at,
            updated_at=course.updated_at,
            lessons=[LessonPublic.from_lesson(lesson) for lesson in course.lessons] if with_lessons else None,
        )


class EnrollmentPublic(CamelModel):
    id: UUID
    user_id: UUID
    course_id: UUID
    progress: int
    enrolled_at: datetime
    completed_at: Optional[datetime] = None
    course: Optional[CoursePublic] = None

    @classmethod
    def from_enrollment(cls, enrollment: Enrollment, with_course: bool = False) -> "EnrollmentPublic":
        return cls(
            id=enrollment.id,
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            progress=enrollment.progress,
            enrolled_at=enrollment.enrolled_at,
            completed_at=enrollment.completed_at,
            course=CoursePublic.from_course(enrollment.course) if with_course else None,
        )
