"""
Authentication utilities for Teacha.
"""

from .identity import Identity
from .jwt_manager import JWTManager, get_jwt_manager, issue_token, verify_token
from .password import PasswordManager, hash_password, verify_password

__all__ = [
    "Identity",
    "JWTManager",
    "get_jwt_manager",
    "issue_token",
    "verify_token",
    "PasswordManager",
    "hash_password",
    "verify_password",
]
