"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired
to it, and helpers to create users of each role with a bearer token.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="staffing-crm-uploads-")
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from staffing_crm.core.auth import create_access_token, hash_password
from staffing_crm.db.database import Base, get_db, json_dumps
from staffing_crm.main import app
from staffing_crm.models import Customer, Project, ProjectAssignment, Role, User

TEST_PASSWORD = "password123"


@pytest.fixture()
def engine():
    engine = create_engine("sqlite://", json_serializer=json_dumps, connect_args={"check_same_thread": False},
                           poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    """make_user(role, email=None, **fields) -> User"""
    counter = {"n": 0}

    def _make(role=Role.ADMIN, email=None, **fields):
        counter["n"] += 1
        user = User(
            full_name=fields.pop("full_name", f"{role.value.title()} User {counter['n']}"),
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            password_hash=hash_password(fields.pop("password", TEST_PASSWORD)),
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


def auth_headers(user):
    token = create_access_token({"sub": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(make_user):
    return make_user(Role.ADMIN)


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def customer(db, admin):
    customer = Customer(name="TechCorp Ltd", industry="Technology", owner_user_id=admin.id)
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture()
def make_project(db, customer):
    """make_project(assigned_users=(), **fields) -> Project"""

    def _make(assigned_users=(), **fields):
        fields.setdefault("title", "Senior React Developers")
        fields.setdefault("customer_id", customer.id)
        project = Project(**fields)
        project.user_assignments = [ProjectAssignment(user_id=u.id) for u in assigned_users]
        db.add(project)
        db.commit()
        return project

    return _make
