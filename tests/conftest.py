"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database and an HTTP client bound to
the FastAPI app, with storage and notifications redirected to test doubles.

Usage:
    pytest tests/ -v
"""

import os

# Settings are read at import time: configure the environment first
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import rgaa_audit.domain  # noqa: F401
from rgaa_audit.db.base import Base, enable_sqlite_foreign_keys, get_db
from rgaa_audit.main import app
from rgaa_audit.services.notifier import LogNotifier, get_notifier
from rgaa_audit.services.storage import LocalFileStorage, get_storage


# ═══════════════════════════════════════════════════════
# DATABASE
# ═══════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    # StaticPool keeps a single connection so the in-memory DB survives across sessions
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


# ═══════════════════════════════════════════════════════
# TEST DOUBLES
# ═══════════════════════════════════════════════════════

class RecordingNotifier(LogNotifier):
    """LogNotifier that also keeps every sent notification."""

    def __init__(self):
        super().__init__("http://front.test", "noreply@test", enabled=True)
        self.sent = []

    async def send(self, notification):
        self.sent.append(notification)
        await super().send(notification)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ═══════════════════════════════════════════════════════
# HTTP CLIENT
# ═══════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(session_factory, storage, notifier):
    async def _get_db():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════
# PAYLOADS
# ═══════════════════════════════════════════════════════

@pytest.fixture
def audit_payload():
    return {
        "procedureName": "Demande de logement social",
        "procedureUrl": "https://demarches.example.fr/logement",
        "initiator": "Ministère de l'Intérieur",
        "auditorName": "Camille Martin",
        "auditorEmail": "camille@example.fr",
        "auditType": "FULL",
        "recipients": [{"name": "Alex", "email": "alex@example.fr"}],
        "pages": [
            {"name": "Accueil", "url": "https://demarches.example.fr/"},
            {"name": "Formulaire", "url": "https://demarches.example.fr/form"},
        ],
    }


@pytest_asyncio.fixture
async def created_audit(client, audit_payload):
    resp = await client.post("/api/v1/audits", json=audit_payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def make_update():
    """Build a full-state update body from an AuditOut payload."""

    def _make(audit: dict, **overrides) -> dict:
        body = {
            "procedureName": audit["procedureName"],
            "procedureUrl": audit["procedureUrl"],
            "initiator": audit["initiator"],
            "auditorName": audit["auditorName"],
            "auditorEmail": audit["auditorEmail"],
            "auditType": audit["auditType"],
            "technologies": audit["technologies"],
            "recipients": [{"name": r["name"], "email": r["email"]} for r in audit["recipients"]],
            "tools": [],
            "environments": [],
            "pages": [{"id": p["id"], "name": p["name"], "url": p["url"]} for p in audit["pages"]],
        }
        body.update(overrides)
        return body

    return _make
