"""
Authenticated identity carried in access token claims.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from teacha.database.models.user import UserRole


@dataclass(frozen=True)
class Identity:
    """
    Claims of a verified access token.

    The role is the one issued with the token. Role changes made after
    issuance apply from the next login.
    """

    user_id: str
    role: str
    email: Optional[str] = None
    tenant_id: Optional[str] = None

    @property
    def user_uuid(self) -> UUID:
        return UUID(self.user_id)

    @property
    def tenant_uuid(self) -> Optional[UUID]:
        return UUID(self.tenant_id) if self.tenant_id else None

    @property
    def is_platform_admin(self) -> bool:
        """ADMIN without a tenant; may act on every tenant."""
        return self.role == UserRole.ADMIN.value and self.tenant_id is None

    def to_claims(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {"userId": self.user_id, "role": self.role}
        if self.email:
            claims["email"] = self.email
        if self.tenant_id:
            claims["tenantId"] = self.tenant_id
        return claims

    @classmethod
    def from_claims(cls, payload: Dict[str, Any]) -> "Identity":
        """Build an identity from a decoded payload. Raises KeyError on missing claims."""
        return cls(
            user_id=str(payload["userId"]),
            role=str(payload["role"]),
            email=payload.get("email"),
            tenant_id=payload.get("tenantId"),
        )

    @classmethod
    def for_user(cls, user) -> "Identity":
        """Identity for a persisted User row."""
        return cls(
            user_id=str(user.id),
            role=user.role.value if hasattr(user.role, "value") else str(user.role),
            email=user.email,
            tenant_id=str(user.tenant_id) if user.tenant_id else None,
        )
