"""
Pytest configuration and fixtures for ShareHub tests

Each test gets its own SQLite file under tmp_path. Connections are not
pooled, so the same database can be used from the TestClient's event loop,
from pytest-asyncio's loop and from asyncio.run() in sync tests.
"""

import asyncio
from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import sharehub.database as database_module
import sharehub.models  # noqa: F401
from main import app
from sharehub.auth import create_access_token, hash_password
from sharehub.context import TenantContext
from sharehub.database import Base, get_db
from sharehub.middleware.rate_limit import limiter
from sharehub.models.admin import Admin
from sharehub.models.tenant import Tenant
from sharehub.services.storage_service import storage
from sharehub.services.usage_recorder import usage_recorder
from sharehub.utils.timeutils import utcnow

ADMIN_EMAIL = "admin@grandhotel.example"
ADMIN_PASSWORD = "adminpassword"
OTHER_ADMIN_EMAIL = "admin@seaside.example"


async def _init_database(engine, factory) -> dict:
    """Create all tables and seed two tenants, each with one admin."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with factory() as session:
        tenant = Tenant(name="Grand Hotel", slug="grand-hotel")
        other_tenant = Tenant(name="Seaside Resort", slug="seaside-resort")
        session.add_all([tenant, other_tenant])
        await session.flush()

        admin = Admin(
            tenant_id=tenant.id,
            email=ADMIN_EMAIL,
            full_name="Test Admin",
            hashed_password=hash_password(ADMIN_PASSWORD),
        )
        other_admin = Admin(
            tenant_id=other_tenant.id,
            email=OTHER_ADMIN_EMAIL,
            full_name="Other Admin",
            hashed_password=hash_password(ADMIN_PASSWORD),
        )
        session.add_all([admin, other_admin])
        await session.commit()

        return {
            "tenant_id": tenant.id,
            "admin_id": admin.id,
            "other_tenant_id": other_tenant.id,
            "other_admin_id": other_admin.id,
        }


@pytest.fixture
def test_engine(tmp_path):
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)


@pytest.fixture
def session_factory(test_engine, tmp_path, monkeypatch):
    """Point the app's database and storage at per-test locations."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    monkeypatch.setattr(database_module, "AsyncSessionLocal", factory)
    monkeypatch.setattr(storage, "root", tmp_path / "storage")

    async def _override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def seeded(test_engine, session_factory) -> dict:
    """Schema plus seed data, for sync (TestClient) tests."""
    ids = asyncio.run(_init_database(test_engine, session_factory))
    yield ids
    # Flush usage updates queued by this test while its database still exists
    asyncio.run(usage_recorder.process_pending())


@pytest.fixture
async def seed(test_engine, session_factory) -> dict:
    """Schema plus seed data, for async service tests."""
    ids = await _init_database(test_engine, session_factory)
    yield ids
    await usage_recorder.process_pending()


@pytest.fixture
async def db(seed, session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def admin_ctx(seed) -> TenantContext:
    return TenantContext(tenant_id=seed["tenant_id"], actor_type="admin", actor_id=seed["admin_id"], can_write=True)


@pytest.fixture
def other_admin_ctx(seed) -> TenantContext:
    return TenantContext(
        tenant_id=seed["other_tenant_id"], actor_type="admin", actor_id=seed["other_admin_id"], can_write=True
    )


@pytest.fixture
def client(seeded):
    """Test client without lifespan: no background worker, no scheduler."""
    return TestClient(app)


@pytest.fixture
def auth_headers(seeded) -> dict:
    access_token = create_access_token(data={"sub": ADMIN_EMAIL}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def other_auth_headers(seeded) -> dict:
    access_token = create_access_token(data={"sub": OTHER_ADMIN_EMAIL}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {access_token}"}


# ── API helpers ────────────────────────────────────────────────────────────────


def future_date(days: int = 30) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def future_datetime(days: int = 30) -> str:
    return (utcnow() + timedelta(days=days)).isoformat()


@pytest.fixture
def make_event(client, auth_headers):
    def _make(**overrides) -> dict:
        payload = {"name": "Annual Conference", "date": future_date()}
        payload.update(overrides)
        response = client.post("/events", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_session(client, auth_headers):
    def _make(event_id: int, **overrides) -> dict:
        payload = {"title": "Morning Session"}
        payload.update(overrides)
        response = client.post(f"/events/{event_id}/sessions", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_speech(client, auth_headers):
    def _make(session_id: int, **overrides) -> dict:
        payload = {"title": "Keynote", "speaker_name": "Ada Lovelace"}
        payload.update(overrides)
        response = client.post(f"/sessions/{session_id}/speeches", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def upload_slide(client, auth_headers):
    def _upload(
        speech_id: int,
        filename: str = "deck.pdf",
        content: bytes = b"%PDF-1.4 test deck",
        mime_type: str = "application/pdf",
        headers: dict | None = None,
    ):
        files = {"file": (filename, content, mime_type)}
        return client.post(f"/speeches/{speech_id}/slides", files=files, headers=headers or auth_headers)

    return _upload

