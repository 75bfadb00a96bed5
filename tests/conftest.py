"""
Test configuration and fixtures for Teacha
"""
import os

# Settings are read once at import time, so the test environment must be set first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_DIR"] = ""
os.environ["SENTRY_DSN"] = ""

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from teacha.api.main import app
from teacha.auth import Identity, hash_password, issue_token
from teacha.database.connection import create_db_engine, get_db
from teacha.database.models import Base, Course, CourseStatus, Tenant, TenantPlan, User, UserRole
from teacha.services.tenant_settings import default_settings, dump_settings

TEST_PASSWORD = "TestPassword123!"


# =============================================================================
# Test Database Setup
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """Create a new database session for each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# FastAPI Test Client
# =============================================================================

@pytest.fixture(scope="function")
def client(db_session) -> TestClient:
    """Create FastAPI test client with overridden dependencies"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Test Data Fixtures
# =============================================================================

def create_tenant(db: Session, slug: str, plan: TenantPlan = TenantPlan.FREE, **kwargs) -> Tenant:
    tenant = Tenant(
        name=kwargs.pop("name", slug.replace("-", " ").title()),
        slug=slug,
        plan=plan,
        settings=dump_settings(default_settings(plan)),
        **kwargs,
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


def create_user(db: Session, email: str, role: UserRole = UserRole.STUDENT,
                tenant: Tenant = None, name: str = "Test User") -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        tenant_id=tenant.id if tenant else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_course(db: Session, tenant: Tenant, slug: str,
                  status: CourseStatus = CourseStatus.PUBLISHED, **kwargs) -> Course:
    course = Course(
        tenant_id=tenant.id,
        title=kwargs.pop("title", slug.replace("-", " ").title()),
        slug=slug,
        status=status,
        **kwargs,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def headers_for(user: User) -> dict:
    """Authorization headers carrying a token for the user"""
    return {"Authorization": f"Bearer {issue_token(Identity.for_user(user))}"}


@pytest.fixture
def test_tenant(db_session) -> Tenant:
    return create_tenant(db_session, "acme-academy")


@pytest.fixture
def other_tenant(db_session) -> Tenant:
    return create_tenant(db_session, "other-school", plan=TenantPlan.PRO)


@pytest.fixture
def owner(db_session, test_tenant) -> User:
    return create_user(db_session, "owner@acme.com", UserRole.TENANT_OWNER, test_tenant, name="Owner")


@pytest.fixture
def instructor(db_session, test_tenant) -> User:
    return create_user(db_session, "teacher@acme.com", UserRole.INSTRUCTOR, test_tenant, name="Teacher")


@pytest.fixture
def student(db_session, test_tenant) -> User:
    return create_user(db_session, "student@acme.com", UserRole.STUDENT, test_tenant, name="Student")


@pytest.fixture
def outsider(db_session, other_tenant) -> User:
    return create_user(db_session, "owner@other.com", UserRole.TENANT_OWNER, other_tenant, name="Outsider")


@pytest.fixture
def platform_admin(db_session) -> User:
    return create_user(db_session, "admin@teacha.com", UserRole.ADMIN, name="Platform Admin")


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    return headers_for


@pytest.fixture
def make_tenant(db_session) -> Callable[..., Tenant]:
    return lambda slug, **kwargs: create_tenant(db_session, slug, **kwargs)


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    return lambda email, **kwargs: create_user(db_session, email, **kwargs)


@pytest.fixture
def make_course(db_session) -> Callable[..., Course]:
    return lambda tenant, slug, **kwargs: create_course(db_session, tenant, slug, **kwargs)
