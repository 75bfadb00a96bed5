"""
FastAPI middleware components.
"""

from .auth import (
    IdentityContextMiddleware,
    get_current_identity,
    optional_auth,
    require_auth,
    require_role,
)
from .error_handler import ErrorHandlerMiddleware, teacha_error_handler

__all__ = [
    "IdentityContextMiddleware",
    "get_current_identity",
    "optional_auth",
    "require_auth",
    "require_role",
    "ErrorHandlerMiddleware",
    "teacha_error_handler",
]
