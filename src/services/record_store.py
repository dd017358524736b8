"""Record persistence: store contract and SQLAlchemy implementation"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select
import logging

from src.errors import RecordNotFoundError, RemoteError
from src.ingestion.file_handler import FileHandler
from src.models.database import AsyncSessionLocal
from src.models.db_models import Record as RecordDB
from src.models.db_utils import apply_row, db_to_row

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class RecordStore(ABC):
    """
    Remote persistence for vehicle records.

    Rows use the stored column names (see ``db_utils.WRITABLE_COLUMNS``).
    Every failure surfaces as ``RemoteError`` carrying the backend message.
    """

    @abstractmethod
    async def insert(self, row: Row) -> str:
        """Insert a row and return its new id"""

    @abstractmethod
    async def update(self, record_id: str, partial: Row) -> None:
        """Update the given columns of an existing row"""

    @abstractmethod
    async def list(self) -> List[Row]:
        """All rows, newest first"""

    @abstractmethod
    async def get(self, record_id: str) -> Optional[Row]:
        """One row by id, or None"""

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Permanently delete a row"""

    @abstractmethod
    async def upload_binary(self, content: bytes, name: str) -> str:
        """Store a binary under ``name`` and return its public URL"""


class SqlRecordStore(RecordStore):
    """RecordStore backed by SQLAlchemy (async) and a FileHandler"""

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        file_handler: Optional[FileHandler] = None,
    ):
        self.session_factory = session_factory or AsyncSessionLocal
        self._file_handler = file_handler

    @property
    def file_handler(self) -> FileHandler:
        if self._file_handler is None:
            self._file_handler = FileHandler()
        return self._file_handler

    async def _get_or_fail(self, session: AsyncSession, record_id: str) -> RecordDB:
        result = await session.execute(
            select(RecordDB).where(RecordDB.id == record_id)
        )
        record_db = result.scalar_one_or_none()
        if record_db is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return record_db

    async def insert(self, row: Row) -> str:
        async with self.session_factory() as session:
            try:
                record_db = apply_row(RecordDB(), row)
                session.add(record_db)
                await session.commit()
                await session.refresh(record_db)
            except Exception as e:
                await session.rollback()
                logger.error(f"Error inserting record: {e}", exc_info=True)
                raise RemoteError(str(e)) from e

        logger.info(f"Inserted record {record_db.id} (plate {record_db.placa})")
        return record_db.id

    async def update(self, record_id: str, partial: Row) -> None:
        async with self.session_factory() as session:
            try:
                record_db = await self._get_or_fail(session, record_id)
                apply_row(record_db, partial)
                await session.commit()
            except RemoteError:
                await session.rollback()
                raise
            except Exception as e:
                await session.rollback()
                logger.error(f"Error updating record {record_id}: {e}", exc_info=True)
                raise RemoteError(str(e)) from e

        logger.info(f"Updated record {record_id}: {sorted(partial)}")

    async def list(self) -> List[Row]:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(RecordDB).order_by(RecordDB.created_at.desc())
                )
                return [db_to_row(r) for r in result.scalars().all()]
            except Exception as e:
                logger.error(f"Error listing records: {e}", exc_info=True)
                raise RemoteError(str(e)) from e

    async def get(self, record_id: str) -> Optional[Row]:
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(RecordDB).where(RecordDB.id == record_id)
                )
                record_db = result.scalar_one_or_none()
            except Exception as e:
                logger.error(f"Error getting record {record_id}: {e}", exc_info=True)
                raise RemoteError(str(e)) from e
        return db_to_row(record_db) if record_db else None

    async def delete(self, record_id: str) -> None:
        async with self.session_factory() as session:
            try:
                record_db = await self._get_or_fail(session, record_id)
                await session.delete(record_db)
                await session.commit()
            except RemoteError:
                await session.rollback()
                raise
            except Exception as e:
                await session.rollback()
                logger.error(f"Error deleting record {record_id}: {e}", exc_info=True)
                raise RemoteError(str(e)) from e

        logger.info(f"Deleted record {record_id}")

    async def upload_binary(self, content: bytes, name: str) -> str:
        try:
            return await asyncio.to_thread(self.file_handler.upload_file, content, name)
        except Exception as e:
            logger.error(f"Error uploading {name}: {e}", exc_info=True)
            raise RemoteError(str(e)) from e
