"""
JWT token management for authentication.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import uuid

from jose import JWTError, jwt

from teacha.auth.identity import Identity
from teacha.utils.config import get_settings
from teacha.utils.exceptions import AuthenticationError
from teacha.utils.logger import get_logger

logger = get_logger(__name__)


class JWTManager:
    """
    Issues and verifies signed access tokens.

    Claims: userId, role, email, tenantId plus type/iat/exp/jti.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        """
        Initialize JWT manager. Unset arguments fall back to settings.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: Signing algorithm
            access_token_expire_minutes: Access token TTL in minutes
        """
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        ttl = access_token_expire_minutes or settings.access_token_expire_minutes
        self.access_token_expire = timedelta(minutes=ttl)

        logger.debug(f"Initialized JWT manager (algorithm={self.algorithm}, access_ttl={ttl}m)")

    def issue(self, identity: Identity, additional_claims: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a signed, expiring access token for the identity.

        Args:
            identity: Claims to embed
            additional_claims: Optional extra claims

        Returns:
            JWT access token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            **identity.to_claims(),
            "type": "access",
            "iat": now,
            "exp": now + self.access_token_expire,
            "jti": str(uuid.uuid4()),
        }
        if additional_claims:
            payload.update(additional_claims)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"Issued access token for user {identity.user_id}")
        return token

    def verify(self, token: Optional[str]) -> Identity:
        """
        Verify a bearer token and return its identity.

        Raises:
            AuthenticationError: Token is missing, malformed, expired,
                signed with another key or lacks required claims
        """
        if not token:
            raise AuthenticationError()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise AuthenticationError() from e

        if payload.get("type") != "access":
            logger.warning(f"Invalid token type: {payload.get('type')}")
            raise AuthenticationError()

        try:
            return Identity.from_claims(payload)
        except KeyError as e:
            logger.warning(f"Token missing claim: {e}")
            raise AuthenticationError() from e


# Global JWT manager instance
_jwt_manager: Optional[JWTManager] = None


def get_jwt_manager() -> JWTManager:
    """Get or create global JWT manager instance."""
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def issue_token(identity: Identity) -> str:
    """Convenience function to issue an access token."""
    return get_jwt_manager().issue(identity)


def verify_token(token: Optional[str]) -> Identity:
    """Convenience function to verify an access token."""
    return get_jwt_manager().verify(token)
