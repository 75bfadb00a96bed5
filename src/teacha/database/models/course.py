"""
Course model - owned by a tenant, slug unique within the tenant.
"""

import enum
import uuid

from sqlalchemy import (
    Column, String, Text, DateTime, Numeric, Enum as SQLEnum, ForeignKey, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class CourseStatus(str, enum.Enum):
    """Publication status of a course."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Course(Base):
    """Course offered by a tenant."""

    __tablename__ = "courses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status = Column(SQLEnum(CourseStatus, name="course_status"), nullable=False, default=CourseStatus.DRAFT)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="courses")
    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.order",
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tenant_id", "slug", name="uq_courses_tenant_slug"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED

    def __repr__(self):
        return f"<Course(id={self.id}, slug='{self.slug}', status={self.status.value})>"
