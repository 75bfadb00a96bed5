"""
Integration tests for tenant signup and tenant management
"""
import re

import pytest
from fastapi import status
from jose import jwt

from teacha.database.models import Tenant, User, UserRole
from teacha.utils.config import get_settings

SIGNUP = {
    "tenantName": "Acme Academy",
    "tenantSlug": "acme",
    "ownerName": "Olive Owner",
    "ownerEmail": "olive@acme.com",
    "password": "password123",
    "plan": "pro",
}


class TestSignup:

    def test_signup_success(self, client, db_session):
        response = client.post("/tenants/signup", json=SIGNUP)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Tenant registered successfully"
        assert data["tenant"]["slug"] == "acme"
        assert data["tenant"]["plan"] == "pro"
        assert data["owner"]["role"] == "TENANT_OWNER"
        assert data["dashboardUrl"] == "https://acme.teacha.com/dashboard"
        assert data["publicUrl"] == "https://acme.teacha.com"

        settings = get_settings()
        claims = jwt.decode(data["token"], settings.secret_key, algorithms=[settings.jwt_algorithm])
        assert claims["tenantId"] == data["tenant"]["id"]
        assert claims["role"] == "TENANT_OWNER"

        owner = db_session.query(User).filter(User.email == "olive@acme.com").one()
        assert str(owner.tenant_id) == data["tenant"]["id"]

    def test_signup_with_domain(self, client):
        response = client.post("/tenants/signup", json={**SIGNUP, "domain": "https://learn.acme.com"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["publicUrl"] == "https://learn.acme.com"
        assert response.json()["tenant"]["domain"] == "https://learn.acme.com"

    def test_plan_defaults_to_free(self, client):
        payload = {key: value for key, value in SIGNUP.items() if key != "plan"}

        response = client.post("/tenants/signup", json=payload)

        assert response.json()["tenant"]["plan"] == "free"

    def test_duplicate_slug(self, client, make_tenant):
        make_tenant("acme")

        response = client.post("/tenants/signup", json=SIGNUP)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Slug is already taken. Please choose a different one."}

    def test_duplicate_owner_email(self, client, db_session, make_user):
        make_user("olive@acme.com")

        response = client.post("/tenants/signup", json=SIGNUP)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Email is already registered. Please use a different email."}
        assert db_session.query(Tenant).count() == 0

    @pytest.mark.parametrize("override", [
        {"tenantSlug": "Acme"},
        {"tenantSlug": "ac"},
        {"tenantSlug": "acme_academy"},
        {"password": "short"},
        {"domain": "not a url"},
        {"plan": "enterprise"},
    ])
    def test_signup_validation(self, client, override):
        response = client.post("/tenants/signup", json={**SIGNUP, **override})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Validation failed"


class TestCheckSlug:

    def test_available(self, client):
        response = client.post("/tenants/check-slug", json={"slug": "available-slug"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"available": True, "slug": "available-slug", "suggestion": None}

    def test_taken(self, client, make_tenant):
        make_tenant("taken-slug")

        data = client.post("/tenants/check-slug", json={"slug": "taken-slug"}).json()

        assert data["available"] is False
        assert re.match(r"^taken-slug-\d+$", data["suggestion"])

    @pytest.mark.parametrize("slug", ["UPPER", "no spaces", "x", "a" * 51])
    def test_invalid_format(self, client, slug):
        response = client.post("/tenants/check-slug", json={"slug": slug})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Invalid slug format"}


class TestCurrentTenant:

    def test_get_current_with_stats(self, client, test_tenant, owner, student, make_course, auth_headers):
        make_course(test_tenant, "python-101")

        response = client.get("/tenants/current", headers=auth_headers(student))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tenant"]["id"] == str(test_tenant.id)
        assert data["tenant"]["settings"]["branding"]["primaryColor"] == "#3B82F6"
        assert data["stats"] == {
            "totalUsers": 2,
            "totalCourses": 1,
            "totalStudents": 1,
            "publishedCourses": 1,
        }

    def test_user_without_tenant(self, client, platform_admin, auth_headers):
        response = client.get("/tenants/current", headers=auth_headers(platform_admin))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "User is not associated with a tenant"}

    def test_requires_authentication(self, client):
        assert client.get("/tenants/current").status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_merges_settings(self, client, owner, auth_headers):
        response = client.put("/tenants/current", json={
            "name": "Acme Learning",
            "settings": {"branding": {"primaryColor": "#FFF"}},
        }, headers=auth_headers(owner))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Tenant updated successfully"
        assert data["tenant"]["name"] == "Acme Learning"
        assert data["tenant"]["settings"]["branding"]["primaryColor"] == "#FFF"
        assert data["tenant"]["settings"]["features"]["analytics"] is True
        assert data["tenant"]["settings"]["payment"]["currency"] == "USD"

    def test_update_forbidden_for_student(self, client, student, auth_headers):
        response = client.put("/tenants/current", json={"name": "Hijacked"}, headers=auth_headers(student))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_role_comes_from_token(self, client, db_session, student, auth_headers):
        """Promotions apply to tokens issued after the change."""
        stale_headers = auth_headers(student)
        student.role = UserRole.ADMIN
        db_session.commit()

        stale = client.put("/tenants/current", json={"name": "Renamed"}, headers=stale_headers)
        fresh = client.put("/tenants/current", json={"name": "Renamed"}, headers=auth_headers(student))

        assert stale.status_code == status.HTTP_403_FORBIDDEN
        assert fresh.status_code == status.HTTP_200_OK

    def test_update_domain_conflict(self, client, owner, make_tenant, auth_headers):
        make_tenant("other", domain="https://taken.example.com")

        response = client.put("/tenants/current", json={"domain": "https://taken.example.com"},
                              headers=auth_headers(owner))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
