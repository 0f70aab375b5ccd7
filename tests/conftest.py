"""
Shared fixtures

Tests run against a throwaway SQLite database (aiosqlite). DATABASE_URL must be
set before any teachhub module is imported, because the engine is created at
import time.
"""
import os
import sys
import tempfile
import uuid
from pathlib import Path

_DB_FILE = Path(tempfile.gettempdir()) / f"teachhub_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["ORPHAN_SWEEP_ENABLED"] = "false"

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from httpx import ASGITransport, AsyncClient

from teachhub.database import AsyncSessionLocal, Base, engine
from teachhub.models.user import User
from teachhub.services.storage import StorageBackend, set_storage
import teachhub.models  # noqa: F401  registers tables on Base.metadata


class RecordingStorage(StorageBackend):
    """Storage backend that remembers deleted keys; keys in `failing` raise"""

    def __init__(self):
        self.deleted = []
        self.failing = set()

    async def delete(self, storage_key: str) -> None:
        if storage_key in self.failing:
            raise OSError(f"cannot delete {storage_key}")
        self.deleted.append(storage_key)


@pytest.fixture
async def database():
    """Fresh schema for every test"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def storage():
    backend = RecordingStorage()
    set_storage(backend)
    yield backend
    set_storage(None)


@pytest.fixture
async def db_session(database, storage):
    async with AsyncSessionLocal() as session:
        yield session


async def _create_user(session, name: str, email: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        role=role,
        access_token=f"token-{uuid.uuid4().hex}",
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def admin_user(db_session):
    return await _create_user(db_session, "Ada Teacher", "teacher@example.com", "admin")


@pytest.fixture
async def student_user(db_session):
    return await _create_user(db_session, "Sam Student", "sam@example.com", "student")


@pytest.fixture
async def other_student(db_session):
    return await _create_user(db_session, "Olive Student", "olive@example.com", "student")


@pytest.fixture
async def client(database, storage):
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth():
    """Bearer header builder for fixture users"""
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {user.access_token}"}
    return _headers
