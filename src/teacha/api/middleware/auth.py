"""
Authorization policies applied per route.

- require_auth: a valid bearer token is mandatory (401 otherwise)
- optional_auth: a valid token yields an identity, anything else yields None
- require_role: require_auth plus a role allow-list (403 on mismatch)

The role is read from the token claims, never from the database.
"""

from contextvars import ContextVar
from typing import Callable, Iterable, Optional, Set, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.middleware.base import BaseHTTPMiddleware

from teacha.auth import Identity, verify_token
from teacha.database.models import UserRole
from teacha.monitoring.sentry_config import set_user_context
from teacha.utils.exceptions import AuthenticationError, AuthorizationError
from teacha.utils.logger import get_logger

logger = get_logger(__name__)

TOKEN_REQUIRED = "Unauthorized - Valid token required"

# Request-scoped identity for logging and error reporting
current_identity_context: ContextVar[Optional[Identity]] = ContextVar("current_identity", default=None)

# Security scheme; missing or non-Bearer headers reach the policies as None
security = HTTPBearer(auto_error=False)

RoleSpec = Union[str, UserRole, Iterable[Union[str, UserRole]]]

MANAGER_ROLES = (UserRole.TENANT_OWNER, UserRole.ADMIN)
AUTHOR_ROLES = (UserRole.INSTRUCTOR, UserRole.TENANT_OWNER, UserRole.ADMIN)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


class IdentityContextMiddleware(BaseHTTPMiddleware):
    """
    Records the caller's identity, when the request carries a valid token,
    in a context variable and in the Sentry scope.

    Never rejects a request; the route policies decide access.
    """

    async def dispatch(self, request: Request, call_next):
        token = _bearer_token(request.headers.get("Authorization"))
        identity = None
        if token:
            try:
                identity = verify_token(token)
            except AuthenticationError:
                logger.debug(f"Ignoring invalid token on {request.url.path}")

        if identity:
            set_user_context(user_id=identity.user_id, role=identity.role, tenant_id=identity.tenant_id)

        reset_token = current_identity_context.set(identity)
        try:
            return await call_next(request)
        finally:
            current_identity_context.reset(reset_token)


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """
    Dependency that rejects requests without a valid bearer token.

    Usage:
        @router.get("/protected")
        def protected_route(identity: Identity = Depends(require_auth)):
            return {"user_id": identity.user_id}
    """
    token = credentials.credentials if credentials else None
    try:
        return verify_token(token)
    except AuthenticationError:
        raise AuthenticationError(TOKEN_REQUIRED)


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Identity]:
    """Dependency yielding the caller's identity, or None. Never rejects."""
    if credentials is None:
        return None
    try:
        return verify_token(credentials.credentials)
    except AuthenticationError:
        return None


def _role_names(roles) -> Set[str]:
    names: Set[str] = set()
    for role in roles:
        if isinstance(role, (str, UserRole)):
            names.add(role.value if isinstance(role, UserRole) else role)
        else:
            names.update(_role_names(role))
    return names


def require_role(*roles: RoleSpec) -> Callable[..., Identity]:
    """
    Build a dependency allowing only the given roles.

    Accepts single roles or lists: ``require_role("ADMIN")``,
    ``require_role(["TENANT_OWNER", "ADMIN"])`` and
    ``require_role(UserRole.TENANT_OWNER, UserRole.ADMIN)`` are equivalent forms.
    """
    allowed = frozenset(_role_names(roles))

    def role_checker(identity: Identity = Depends(require_auth)) -> Identity:
        if identity.role not in allowed:
            logger.warning(
                f"Role {identity.role} of user {identity.user_id} not in {sorted(allowed)}"
            )
            raise AuthorizationError()
        return identity

    return role_checker


def get_current_identity() -> Optional[Identity]:
    return current_identity_context.get()
