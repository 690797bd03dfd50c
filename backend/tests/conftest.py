"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database and an in-memory blob
store; API tests drive the real app through httpx with get_db and
get_blob_storage overridden.
"""

from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import findx.models  # noqa: F401
from findx.database import Base, get_db
from findx.errors import ExternalServiceError
from findx.services import accounts
from findx.services.domains import seed_domains
from findx.services.resumes import ResumeUpload
from findx.services.storage import BlobStorage, CloudinaryStorage, StoredBlob, get_blob_storage

PDF = "application/pdf"


class FakeBlobStorage(BlobStorage):
    """In-memory stand-in for Cloudinary that records every call."""

    provider = "memory"

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_uploads = False
        self.fail_deletes = False
        self._counter = 0
        self._urls = CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret", folder="")

    async def upload(self, data: bytes, filename: str, kind: str = "raw") -> StoredBlob:
        if self.fail_uploads:
            raise ExternalServiceError("Failed to upload file")
        self._counter += 1
        storage_id = f"findx/resumes/{self._counter}_{filename.rsplit('.', 1)[0]}"
        self.blobs[storage_id] = data
        return StoredBlob(
            url=f"https://res.cloudinary.com/demo/{kind}/upload/v1/{storage_id}",
            storage_id=storage_id,
        )

    async def delete(self, storage_id: str, kind: str = "raw") -> bool:
        self.deleted.append(storage_id)
        if self.fail_deletes:
            raise ExternalServiceError("Failed to delete file")
        return self.blobs.pop(storage_id, None) is not None

    def storage_id_from_url(self, url: str) -> Optional[str]:
        return self._urls.storage_id_from_url(url)


def make_upload(filename: str = "cv.pdf", content_type: str = PDF, data: bytes = b"%PDF-1.4 resume") -> ResumeUpload:
    return ResumeUpload(filename=filename, content_type=content_type, data=data)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return FakeBlobStorage()


@pytest.fixture
def make_user(db):
    """Register a user through the accounts service and return it."""

    async def _make(email: str = "ada@example.com", name: str = "Ada Lovelace", password: str = "secret123"):
        user, _ = await accounts.register(db, name, email, password)
        return user

    return _make


@pytest_asyncio.fixture
async def client(session_factory, storage):
    from findx.main import app

    async with session_factory() as session:
        await seed_domains(session)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
