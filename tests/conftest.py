"""
Shared fixtures.

The application is exercised against a file backed SQLite database. The
postgres schemas ("auth", "audit") are translated away so the same table
definitions can be created there.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("HUMANIZE_LOGS", "true")

import pytest
from unittest.mock import Mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from rbac_admin.apps.api.app import build_app
from rbac_admin.apps.api.dependencies import am, get_audit_sink
from rbac_admin.audit import AuditSink, RequestContext
from rbac_admin.rbac.service import RbacService
from rbac_admin.rbac.store import RbacStore
from rbac_admin.schema.postgres import metadata
from rbac_admin.util.postgres import get_managed_session

ADMIN_UUID = "7d9f7a52-5c1e-4d8e-9a43-1f0c2b6e8a10"


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'rbac.db'}",
        poolclass=NullPool,
        execution_options={"schema_translate_map": {"auth": None, "audit": None}},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


# ============================================================================
# Service
# ============================================================================

@pytest.fixture
def ctx():
    return RequestContext(actor=ADMIN_UUID, ip_address="10.0.0.7")


@pytest.fixture
def audit():
    """Audit sink double that records calls."""
    return Mock(spec=AuditSink)


@pytest.fixture
def store(db):
    return RbacStore(db)


@pytest.fixture
def service(store, audit):
    return RbacService(store, audit, default_guard_name="web")


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def app(session_factory):
    app = build_app()

    def override_session():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_managed_session] = override_session
    app.dependency_overrides[get_audit_sink] = lambda: AuditSink(session_factory)
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers():
    token = am.create_access_token({"sub": ADMIN_UUID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def seed_permissions(client, auth_headers):
    """Create permissions by name and return {name: id}."""

    def seed(*names):
        response = client.post(
            "/v1/permissions",
            json=[{"name": name} for name in names],
            headers=auth_headers,
        )
        assert response.status_code == 201, response.json()
        return {item["name"]: item["id"] for item in response.json()["result"]}

    return seed
