"""Record history: the list view and its mutations"""

import logging
from typing import List, Optional

from src.errors import RecordNotFoundError, RemoteError
from src.models.db_utils import row_to_record, status_patch
from src.models.vehicle_record import RecordStatus, VehicleRecord
from src.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class HistoryService:
    """Owns the in-memory list of records shown to the user"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.records: List[VehicleRecord] = []

    async def refresh(self) -> List[VehicleRecord]:
        """Reload every record from the store, newest first"""
        rows = await self.store.list()
        self.records = [row_to_record(row) for row in rows]
        logger.info(f"Loaded {len(self.records)} records")
        return self.records

    def search(self, term: Optional[str]) -> List[VehicleRecord]:
        """Records whose plate, client name or id contains ``term``"""
        return [r for r in self.records if r.matches(term or "")]

    def find(self, record_id: str) -> VehicleRecord:
        for record in self.records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"Record {record_id} not in the list")

    async def delete(self, record_id: str) -> None:
        """Delete remotely, then drop from the list"""
        await self.store.delete(record_id)
        self.records = [r for r in self.records if r.id != record_id]
        logger.info(f"Removed record {record_id} from history")

    async def toggle_status(self, record_id: str) -> RecordStatus:
        """
        Flip a record between in progress and done.

        The list is updated first; if the store rejects the change the
        previous status is restored and the RemoteError is re-raised for
        the caller to show.
        """
        record = self.find(record_id)
        previous = record.status
        new_status = record.toggle_status()

        try:
            await self.store.update(record_id, status_patch(new_status))
        except RemoteError as e:
            record.status = previous
            logger.warning(f"Status change for {record_id} rejected, reverted to {previous.value}: {e}")
            raise

        logger.info(f"Record {record_id} status: {previous.value} -> {new_status.value}")
        return new_status
