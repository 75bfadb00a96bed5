"""
API route modules.
"""

from . import auth, tenants, users, courses, lessons, enrollments, health

__all__ = ["auth", "tenants", "users", "courses", "lessons", "enrollments", "health"]
