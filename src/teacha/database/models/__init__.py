"""
SQLAlchemy database models for the multi-tenant course platform.

Models:
- Tenant: Customer account with plan and serialized settings
- User: Tenant member with a role
- Course: Tenant-owned course, slug unique per tenant
- Lesson: Ordered content unit of a course
- Enrollment: User progress through a course
"""

from .base import Base
from .tenant import Tenant, TenantPlan, TenantStatus
from .user import User, UserRole
from .course import Course, CourseStatus
from .lesson import Lesson
from .enrollment import Enrollment

__all__ = [
    "Base",
    "Tenant",
    "TenantPlan",
    "TenantStatus",
    "User",
    "UserRole",
    "Course",
    "CourseStatus",
    "Lesson",
    "Enrollment",
]
