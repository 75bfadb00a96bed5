"""
Password hashing and verification utilities.
"""

from typing import Optional

import bcrypt

from teacha.utils.config import get_settings
from teacha.utils.logger import get_logger

logger = get_logger(__name__)


class PasswordManager:
    """
    Manages password hashing and verification using bcrypt.
    """

    def __init__(self, rounds: Optional[int] = None):
        """Initialize password manager with the configured cost factor."""
        self.rounds = rounds or get_settings().bcrypt_rounds

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Args:
            password: Plaintext password

        Returns:
            Hashed password string
        """
        if not password:
            raise ValueError("Password must not be empty")

        # Bcrypt only accepts up to 72 bytes
        password_bytes = password.encode('utf-8')[:72]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password_bytes, salt).decode('utf-8')

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        if not plain_password or not hashed_password:
            return False
        try:
            password_bytes = plain_password.encode('utf-8')[:72]
            return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False


# Global password manager instance
_password_manager: Optional[PasswordManager] = None


def get_password_manager() -> PasswordManager:
    global _password_manager
    if _password_manager is None:
        _password_manager = PasswordManager()
    return _password_manager


def hash_password(password: str) -> str:
    """Convenience function to hash password."""
    return get_password_manager().hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Convenience function to verify password."""
    return get_password_manager().verify(plain_password, hashed_password)
