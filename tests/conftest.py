"""Shared fixtures: in-memory SQLite per test, two tenants, API client."""

import os
import uuid
from datetime import datetime

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Column, DateTime, String, create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tenantscope.core.context import TenantContext
from tenantscope.core.interceptors import build_chain
from tenantscope.core.security import create_access_token
from tenantscope.database import Base, get_db
from tenantscope.models import Project, Tenant, TenantScopedMixin

TENANT_A = "7"
TENANT_B = "8"
TENANT_C = "9"


class Ledger(TenantScopedMixin, Base):
    """Tenant-owned model whose tenant column is not called tenant_id."""

    __tablename__ = "ledgers"
    __tenant_field__ = "org_id"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


def _seed_tenants(session):
    for tenant_id, slug in ((TENANT_A, "acme"), (TENANT_B, "contoso"), (TENANT_C, "initech")):
        session.add(Tenant(id=tenant_id, name=slug.title(), slug=slug))
    session.commit()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    _seed_tenants(session)
    yield session
    session.close()


@pytest.fixture
def fk_db():
    """Session on a SQLite database that enforces foreign keys."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    _seed_tenants(session)
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def seeded(db):
    """Two projects per tenant, one extra soft-deleted project for tenant A."""
    db.add_all([
        Project(tenant_id=TENANT_A, name="a-one"),
        Project(tenant_id=TENANT_A, name="a-two"),
        Project(tenant_id=TENANT_A, name="a-gone", is_deleted=True),
        Project(tenant_id=TENANT_B, name="b-one"),
        Project(tenant_id=TENANT_B, name="b-two"),
        Project(tenant_id=TENANT_C, name="c-one"),
    ])
    db.commit()
    return db


@pytest.fixture
def chain():
    return build_chain()


@pytest.fixture
def tenant_a():
    return TenantContext(tenant_id=TENANT_A, user_id="user-a")


@pytest.fixture
def tenant_b():
    return TenantContext(tenant_id=TENANT_B, user_id="user-b")


@pytest.fixture
def client(db):
    from tenantscope.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(tenant_id, user_id="user", **claims):
    token = create_access_token({"sub": user_id, "tenant_id": tenant_id, **claims})
    return {"Authorization": f"Bearer {token}"}
