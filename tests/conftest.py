"""Pytest configuration and shared fixtures"""

import pytest
import os
import sys
from datetime import datetime, timedelta
from io import BytesIO
from typing import AsyncGenerator, Dict, List, Optional
from uuid import uuid4
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from src.errors import RecordNotFoundError, RemoteError
from src.ingestion.file_handler import FileHandler
from src.models.database import Base
from src.models.line_items import LineItemSet
from src.models.vehicle_record import VehicleRecord
from src.services.record_store import RecordStore, SqlRecordStore


# Test database setup (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


class FakeRecordStore(RecordStore):
    """In-memory RecordStore; set ``fail_on`` to make an operation raise"""

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self.uploads: Dict[str, bytes] = {}
        self.calls: List[str] = []
        self.fail_on: Optional[str] = None
        self._clock = datetime(2024, 1, 1, 8, 0, 0)

    def _check(self, operation: str):
        self.calls.append(operation)
        if self.fail_on == operation:
            raise RemoteError(f"{operation} rejected by backend")

    async def insert(self, row):
        self._check("insert")
        record_id = str(uuid4())
        self._clock += timedelta(minutes=1)
        self.rows[record_id] = {**row, "id": record_id, "created_at": self._clock}
        return record_id

    async def update(self, record_id, partial):
        self._check("update")
        if record_id not in self.rows:
            raise RecordNotFoundError(f"Record {record_id} not found")
        self.rows[record_id].update(partial)

    async def list(self):
        self._check("list")
        return sorted(
            (dict(r) for r in self.rows.values()),
            key=lambda r: r["created_at"],
            reverse=True,
        )

    async def get(self, record_id):
        self._check("get")
        row = self.rows.get(record_id)
        return dict(row) if row else None

    async def delete(self, record_id):
        self._check("delete")
        if record_id not in self.rows:
            raise RecordNotFoundError(f"Record {record_id} not found")
        del self.rows[record_id]

    async def upload_binary(self, content, name):
        self._check("upload_binary")
        self.uploads[name] = content
        return f"https://storage.test/images/{name}"


@pytest.fixture(scope="function")
async def db_session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Fresh tables for each test

    Yields:
        Async session factory bound to the in-memory database
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield TestingSessionLocal

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def file_handler(tmp_path) -> FileHandler:
    """Local FileHandler writing under a temp directory"""
    return FileHandler(
        storage_path=str(tmp_path / "storage"),
        use_azure=False,
        public_base_url="http://testserver/media",
    )


@pytest.fixture
async def sql_store(db_session_factory, file_handler) -> SqlRecordStore:
    return SqlRecordStore(session_factory=db_session_factory, file_handler=file_handler)


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def sample_record() -> VehicleRecord:
    """Sample record as typed in the intake form"""
    record = VehicleRecord(
        plate="ABC-123",
        model="Toyota Corolla 2020",
        mileage="50000",
        client_name="Jane Doe",
        contact="+56 9 1234-5678",
        work_items=LineItemSet.of(("Brake pad", "40")),
        part_items=LineItemSet.of(("Pads", "25")),
    )
    return record


@pytest.fixture
def sample_photo() -> bytes:
    """A large-ish PNG photo"""
    from PIL import Image

    img = Image.new("RGB", (3000, 2000), color=(120, 30, 200))
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
