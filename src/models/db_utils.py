"""Utilities for converting between VehicleRecord and stored rows"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from src.models import record_codec
from src.models.decimal_wire import parse_price, wire_to_decimal
from src.models.db_models import Record as RecordDB
from src.models.vehicle_record import RecordStatus, VehicleRecord

# Columns written by the client; id and created_at belong to the store
WRITABLE_COLUMNS = (
    "placa",
    "cliente",
    "modelo",
    "trabajo",
    "costo",
    "contacto",
    "foto_url",
    "estado",
    "kilometraje",
    "repuestos",
    "codigo",
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _stored_cost(row: Dict[str, Any]) -> Decimal:
    # Older rows only carry the cost in the legacy "cost" column
    cost = wire_to_decimal(row.get("costo"))
    if cost is None or cost == 0:
        legacy = wire_to_decimal(row.get("cost"))
        if legacy is not None:
            cost = legacy
    return parse_price(cost)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def record_to_row(record: VehicleRecord) -> Dict[str, Any]:
    """Convert a VehicleRecord to the writable columns of a stored row"""
    return {
        "placa": record.plate,
        "cliente": record.client_name,
        "modelo": record.model,
        "trabajo": record_codec.encode(record.work_items),
        "costo": record.cost,
        "contacto": record.contact,
        "foto_url": record.photo_url,
        "estado": record.status.value,
        "kilometraje": record.mileage,
        "repuestos": record_codec.encode(record.part_items),
        "codigo": record.external_code or None,
    }


def row_to_record(row: Dict[str, Any]) -> VehicleRecord:
    """Convert a stored row (any vintage) to a VehicleRecord"""
    record_id = row.get("id")
    return VehicleRecord(
        id=str(record_id) if record_id is not None else None,
        external_code=_text(row.get("codigo")).strip() or None,
        plate=_text(row.get("placa")),
        model=_text(row.get("modelo")),
        mileage=_text(row.get("kilometraje")),
        client_name=_text(row.get("cliente")),
        contact=_text(row.get("contacto")),
        work_items=record_codec.decode(row.get("trabajo")),
        part_items=record_codec.decode(row.get("repuestos")),
        cost=_stored_cost(row),
        status=RecordStatus.from_wire(row.get("estado")),
        photo_url=_text(row.get("foto_url")) or None,
        created_at=_parse_timestamp(row.get("created_at")),
    )


def status_patch(status: RecordStatus) -> Dict[str, Any]:
    """Partial update for a status change"""
    return {"estado": status.value}


def db_to_row(record_db: RecordDB) -> Dict[str, Any]:
    """Convert a SQLAlchemy Record to a row dict"""
    row = {column: getattr(record_db, column) for column in WRITABLE_COLUMNS}
    row["id"] = record_db.id
    row["cost"] = record_db.cost
    row["created_at"] = record_db.created_at
    return row


def apply_row(record_db: RecordDB, row: Dict[str, Any]) -> RecordDB:
    """Copy writable columns from a (partial) row onto a SQLAlchemy Record"""
    for key, value in row.items():
        if key in WRITABLE_COLUMNS:
            setattr(record_db, key, value)
    return record_db
