"""Shared FastAPI dependencies"""

from src.services.record_store import RecordStore, SqlRecordStore

_store = None


def get_record_store() -> RecordStore:
    """Process-wide SQL record store"""
    global _store
    if _store is None:
        _store = SqlRecordStore()
    return _store
