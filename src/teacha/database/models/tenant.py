"""
Tenant model - an isolated customer account that owns users and courses.
"""

import enum
import uuid

from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base, utcnow, enum_values


class TenantPlan(str, enum.Enum):
    """Subscription plans. Feature defaults depend on the plan tier."""
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"


class TenantStatus(str, enum.Enum):
    """Tenant lifecycle status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Tenant(Base):
    """
    Tenant account.

    ``settings`` holds the serialized tenant settings record (branding,
    features, payment). It is decoded and re-encoded only through
    teacha.services.tenant_settings.
    """

    __tablename__ = "tenants"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Basic Information
    name = Column(String(255), nullable=False)
    slug = Column(String(50), nullable=False, unique=True, index=True)
    domain = Column(String(255), nullable=True, unique=True)

    # Plan & Status
    plan = Column(
        SQLEnum(TenantPlan, name="tenant_plan", values_callable=enum_values),
        nullable=False,
        default=TenantPlan.FREE,
    )
    status = Column(
        SQLEnum(TenantStatus, name="tenant_status", values_callable=enum_values),
        nullable=False,
        default=TenantStatus.ACTIVE,
        index=True,
    )

    # Serialized TenantSettings
    settings = Column(Text, nullable=False, default="{}")

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    courses = relationship("Course", back_populates="tenant", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}', slug='{self.slug}')>"
