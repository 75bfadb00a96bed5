"""
Course and lesson access rules.

Members of a tenant see all of its courses; everybody else sees published
courses only. Courses outside the caller's reach are reported as missing.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from teacha.auth import Identity
from teacha.database.models import Course, CourseStatus, Lesson
from teacha.utils.exceptions import NotFoundError

COURSE_SLUG_TAKEN = "Course slug already exists in this tenant"


def is_member(identity: Optional[Identity], tenant_id: UUID) -> bool:
    """Whether the caller belongs to the tenant (platform administrators belong to all)."""
    if identity is None:
        return False
    return identity.is_platform_admin or identity.tenant_id == str(tenant_id)


def get_readable_course(db: Session, identity: Optional[Identity], course_id: UUID) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course")
    if course.status != CourseStatus.PUBLISHED and not is_member(identity, course.tenant_id):
        raise NotFoundError("Course")
    return course


def get_tenant_course(db: Session, identity: Identity, course_id: UUID) -> Course:
    """Course of the caller's tenant. Write routes check the role in their dependency."""
    course = db.get(Course, course_id)
    if course is None or not is_member(identity, course.tenant_id):
        raise NotFoundError("Course")
    return course


def get_editable_lesson(db: Session, identity: Identity, lesson_id: UUID) -> Lesson:
    lesson = db.get(Lesson, lesson_id)
    if lesson is None or not is_member(identity, lesson.course.tenant_id):
        raise NotFoundError("Lesson")
    return lesson


def next_lesson_order(db: Session, course_id: UUID) -> int:
    highest = db.query(func.max(Lesson.order)).filter(Lesson.course_id == course_id).scalar()
    return 1 if highest is None else highest + 1
