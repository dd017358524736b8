"""Save flow for vehicle records"""

import logging
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from src.errors import RecordNotFoundError
from src.ingestion.image_compressor import ImageCompressor
from src.models.db_utils import record_to_row, row_to_record
from src.models.vehicle_record import VehicleRecord
from src.services.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class PhotoUpload:
    """A photo picked by the user, before compression"""
    content: bytes
    file_name: str = "photo.jpg"


class RecordService:
    """Validates, uploads the photo and persists a record, in that order"""

    def __init__(self, store: RecordStore, compressor: Optional[ImageCompressor] = None):
        self.store = store
        self.compressor = compressor or ImageCompressor()

    async def save(
        self,
        record: VehicleRecord,
        photo: Optional[PhotoUpload] = None,
    ) -> VehicleRecord:
        """
        Persist a record (insert when new, update otherwise)

        Steps run strictly in sequence and are not retried: compress the
        photo, upload it, then write the row. Any failure aborts the save
        and propagates; a photo uploaded before a failed write stays in
        storage.

        Args:
            record: Record to save; id and photo_url are set on success
            photo: Optional photo to attach (replaces any previous photo)

        Returns:
            The saved record

        Raises:
            RecordValidationError: plate or client name missing (nothing written)
            ImageCompressionError: photo could not be processed
            RemoteError: upload or write failed
        """
        record.validate_for_save()

        photo_url = record.photo_url
        if photo is not None:
            compressed = await self.compressor.compress_async(photo.content)
            stored_name = self._generate_name(compressed.extension or PurePath(photo.file_name).suffix)
            photo_url = await self.store.upload_binary(compressed.content, stored_name)
            logger.info(f"Uploaded photo {stored_name} for plate {record.plate}")

        row = record_to_row(record)
        row["foto_url"] = photo_url

        if record.is_new:
            record_id = await self.store.insert(row)
            record.id = record_id
            logger.info(f"Created record {record_id} for plate {record.plate}")
        else:
            await self.store.update(record.id, row)
            logger.info(f"Updated record {record.id} for plate {record.plate}")

        record.photo_url = photo_url
        return record

    async def load(self, record_id: str) -> VehicleRecord:
        """Reload a stored record for editing"""
        row = await self.store.get(record_id)
        if row is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return row_to_record(row)

    @staticmethod
    def _generate_name(extension: str) -> str:
        extension = extension.lstrip(".") or "jpg"
        return f"{int(time.time() * 1000)}.{extension}"
