"""
Integration tests for tenant-scoped user management
"""
import pytest
from fastapi import status

from teacha.database.models import User, UserRole


class TestListAndGet:

    def test_list_only_own_tenant(self, client, owner, student, outsider, auth_headers):
        response = client.get("/users", headers=auth_headers(student))

        assert response.status_code == status.HTTP_200_OK
        emails = {user["email"] for user in response.json()["users"]}
        assert emails == {"owner@acme.com", "student@acme.com"}

    def test_list_filtered_by_role(self, client, owner, student, instructor, auth_headers):
        response = client.get("/users", params={"role": "INSTRUCTOR"}, headers=auth_headers(owner))

        assert [user["email"] for user in response.json()["users"]] == ["teacher@acme.com"]

    def test_platform_admin_lists_everyone(self, client, owner, outsider, platform_admin, auth_headers):
        response = client.get("/users", headers=auth_headers(platform_admin))

        assert len(response.json()["users"]) == 3

    def test_get_user_of_other_tenant_is_hidden(self, client, student, outsider, auth_headers):
        response = client.get(f"/users/{outsider.id}", headers=auth_headers(student))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "User not found"}

    def test_get_user_same_tenant(self, client, owner, student, auth_headers):
        response = client.get(f"/users/{owner.id}", headers=auth_headers(student))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["role"] == "TENANT_OWNER"

    def test_malformed_id(self, client, student, auth_headers):
        response = client.get("/users/not-a-uuid", headers=auth_headers(student))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_authentication(self, client):
        assert client.get("/users").status_code == status.HTTP_401_UNAUTHORIZED


class TestCreate:

    def test_owner_creates_member(self, client, test_tenant, owner, auth_headers):
        response = client.post("/users", json={
            "name": "New Teacher", "email": "new@acme.com", "password": "secret1", "role": "INSTRUCTOR",
        }, headers=auth_headers(owner))

        assert response.status_code == status.HTTP_201_CREATED
        user = response.json()["user"]
        assert user["tenantId"] == str(test_tenant.id)
        assert user["role"] == "INSTRUCTOR"

    def test_student_cannot_create(self, client, student, auth_headers):
        response = client.post("/users", json={
            "name": "Sneaky", "email": "sneaky@acme.com", "password": "secret1",
        }, headers=auth_headers(student))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_duplicate_email(self, client, owner, outsider, auth_headers):
        response = client.post("/users", json={
            "name": "Copy", "email": "owner@other.com", "password": "secret1",
        }, headers=auth_headers(owner))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "User with this email already exists"}

    def test_platform_admin_chooses_tenant(self, client, other_tenant, platform_admin, auth_headers):
        response = client.post("/users", json={
            "name": "Placed", "email": "placed@other.com", "password": "secret1",
            "tenantId": str(other_tenant.id),
        }, headers=auth_headers(platform_admin))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["tenantId"] == str(other_tenant.id)


class TestUpdate:

    def test_update_self(self, client, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"name": "Me Again"}, headers=auth_headers(student))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["name"] == "Me Again"

    def test_student_cannot_change_own_role(self, client, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"role": "ADMIN"}, headers=auth_headers(student))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_student_cannot_edit_others(self, client, student, instructor, auth_headers):
        response = client.put(f"/users/{instructor.id}", json={"name": "X"}, headers=auth_headers(student))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_owner_changes_role(self, client, owner, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"role": "INSTRUCTOR"}, headers=auth_headers(owner))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["role"] == "INSTRUCTOR"

    def test_email_taken(self, client, student, owner, auth_headers):
        response = client.put(f"/users/{student.id}", json={"email": "owner@acme.com"},
                              headers=auth_headers(student))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "User with this email already exists"}


class TestDelete:

    def test_owner_deletes_member(self, client, db_session, owner, student, auth_headers):
        student_id = student.id

        response = client.delete(f"/users/{student_id}", headers=auth_headers(owner))

        assert response.status_code == status.HTTP_200_OK
        assert db_session.get(User, student_id) is None

    def test_cannot_delete_self(self, client, owner, auth_headers):
        response = client.delete(f"/users/{owner.id}", headers=auth_headers(owner))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cannot_delete_other_tenant_member(self, client, owner, outsider, auth_headers):
        response = client.delete(f"/users/{outsider.id}", headers=auth_headers(owner))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_instructor_cannot_delete(self, client, instructor, student, auth_headers):
        response = client.delete(f"/users/{student.id}", headers=auth_headers(instructor))

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestOwnership:
    """Granting and removing TENANT_OWNER follows one rule on every route"""

    @pytest.fixture
    def tenant_admin(self, make_user, test_tenant):
        return make_user("admin@acme.com", role=UserRole.ADMIN, tenant=test_tenant, name="Acme Admin")

    def test_tenant_admin_cannot_create_owner(self, client, tenant_admin, auth_headers):
        response = client.post("/users", json={
            "name": "Co Owner", "email": "co@acme.com", "password": "secret1", "role": "TENANT_OWNER",
        }, headers=auth_headers(tenant_admin))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_tenant_admin_cannot_promote_to_owner(self, client, db_session, tenant_admin, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"role": "TENANT_OWNER"},
                              headers=auth_headers(tenant_admin))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        db_session.refresh(student)
        assert student.role == UserRole.STUDENT

    def test_tenant_admin_cannot_demote_owner(self, client, db_session, tenant_admin, owner, auth_headers):
        response = client.put(f"/users/{owner.id}", json={"role": "STUDENT"},
                              headers=auth_headers(tenant_admin))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        db_session.refresh(owner)
        assert owner.role == UserRole.TENANT_OWNER

    def test_tenant_admin_edits_owner_name(self, client, tenant_admin, owner, auth_headers):
        response = client.put(f"/users/{owner.id}", json={"name": "Renamed", "role": "TENANT_OWNER"},
                              headers=auth_headers(tenant_admin))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["name"] == "Renamed"

    def test_tenant_admin_changes_member_role(self, client, tenant_admin, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"role": "INSTRUCTOR"},
                              headers=auth_headers(tenant_admin))

        assert response.status_code == status.HTTP_200_OK

    def test_owner_promotes_to_owner(self, client, owner, instructor, auth_headers):
        response = client.put(f"/users/{instructor.id}", json={"role": "TENANT_OWNER"},
                              headers=auth_headers(owner))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["role"] == "TENANT_OWNER"

    def test_platform_admin_promotes_to_owner(self, client, platform_admin, student, auth_headers):
        response = client.put(f"/users/{student.id}", json={"role": "TENANT_OWNER"},
                              headers=auth_headers(platform_admin))

        assert response.status_code == status.HTTP_200_OK
