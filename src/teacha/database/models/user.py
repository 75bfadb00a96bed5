"""
User model - a member of a tenant with a single role.
"""

import enum
import uuid

from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class UserRole(str, enum.Enum):
    """User roles with different permission levels."""
    STUDENT = "STUDENT"            # Enrolls in courses
    INSTRUCTOR = "INSTRUCTOR"      # Authors courses and lessons
    ADMIN = "ADMIN"                # Manages users, courses and tenant settings
    TENANT_OWNER = "TENANT_OWNER"  # Created at tenant signup, full tenant access


class User(Base):
    """
    User account.

    Email is unique across all tenants. ``tenant_id`` is empty only for
    platform administrators created from the CLI.
    """

    __tablename__ = "users"

    # Primary Key
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Tenant Relationship
    tenant_id = Column(Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)

    # Profile
    name = Column(String(255), nullable=False)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole, name="user_role"), nullable=False, default=UserRole.STUDENT)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="users")
    enrollments = relationship("Enrollment", back_populates="user", cascade="all, delete-orphan")

    # Indexes
    __table_args__ = (
        Index("ix_users_tenant_role", "tenant_id", "role"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"
