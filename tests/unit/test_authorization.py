"""
Unit tests for the route authorization policies
"""
from typing import Optional

import pytest
from fastapi import Depends, FastAPI, status
from fastapi.testclient import TestClient

from teacha.api.middleware.auth import optional_auth, require_auth, require_role
from teacha.api.middleware.error_handler import teacha_error_handler
from teacha.auth import Identity, issue_token
from teacha.database.models import UserRole
from teacha.utils.exceptions import TeachaError


def _token(role: str, tenant_id: Optional[str] = "7c1f1d8e-2222-4a4a-9b9b-000000000002") -> dict:
    identity = Identity(
        user_id="7c1f1d8e-1111-4a4a-9b9b-000000000001",
        role=role,
        email="someone@acme.com",
        tenant_id=tenant_id,
    )
    return {"Authorization": f"Bearer {issue_token(identity)}"}


@pytest.fixture
def policy_client() -> TestClient:
    app = FastAPI()
    app.add_exception_handler(TeachaError, teacha_error_handler)

    @app.get("/authenticated")
    def authenticated(identity: Identity = Depends(require_auth)):
        return {"role": identity.role}

    @app.get("/optional")
    def optional(identity: Optional[Identity] = Depends(optional_auth)):
        return {"role": identity.role if identity else None}

    @app.get("/admin-list")
    def admin_list(identity: Identity = Depends(require_role(["ADMIN"]))):
        return {"role": identity.role}

    @app.get("/admin-single")
    def admin_single(identity: Identity = Depends(require_role("ADMIN"))):
        return {"role": identity.role}

    @app.get("/managers")
    def managers(identity: Identity = Depends(require_role(UserRole.TENANT_OWNER, UserRole.ADMIN))):
        return {"role": identity.role}

    return TestClient(app)


class TestRequireAuth:

    def test_missing_token(self, policy_client):
        response = policy_client.get("/authenticated")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Unauthorized - Valid token required"}

    @pytest.mark.parametrize("header", ["Bearer not-a-token", "Basic dXNlcjpwYXNz", "Bearer"])
    def test_invalid_header(self, policy_client, header):
        response = policy_client.get("/authenticated", headers={"Authorization": header})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_valid_token(self, policy_client):
        response = policy_client.get("/authenticated", headers=_token("STUDENT"))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"role": "STUDENT"}


class TestOptionalAuth:

    def test_without_token(self, policy_client):
        assert policy_client.get("/optional").json() == {"role": None}

    def test_invalid_token_is_ignored(self, policy_client):
        response = policy_client.get("/optional", headers={"Authorization": "Bearer broken"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"role": None}

    def test_valid_token(self, policy_client):
        assert policy_client.get("/optional", headers=_token("INSTRUCTOR")).json() == {"role": "INSTRUCTOR"}


class TestRequireRole:

    @pytest.mark.parametrize("path", ["/admin-list", "/admin-single"])
    def test_student_forbidden_admin_allowed(self, policy_client, path):
        denied = policy_client.get(path, headers=_token("STUDENT"))
        allowed = policy_client.get(path, headers=_token("ADMIN"))

        assert denied.status_code == status.HTTP_403_FORBIDDEN
        assert denied.json() == {"error": "Forbidden: insufficient role"}
        assert allowed.status_code == status.HTTP_200_OK

    def test_unauthenticated_is_401_not_403(self, policy_client):
        assert policy_client.get("/admin-list").status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize("role,expected", [
        ("TENANT_OWNER", status.HTTP_200_OK),
        ("ADMIN", status.HTTP_200_OK),
        ("INSTRUCTOR", status.HTTP_403_FORBIDDEN),
        ("STUDENT", status.HTTP_403_FORBIDDEN),
    ])
    def test_enum_roles(self, policy_client, role, expected):
        assert policy_client.get("/managers", headers=_token(role)).status_code == expected

    def test_role_match_is_exact(self, policy_client):
        assert policy_client.get("/admin-list", headers=_token("admin")).status_code == status.HTTP_403_FORBIDDEN
