"""API routes for vehicle records"""

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from typing import Optional
import logging

from api.dependencies import get_record_store
from src.errors import RecordNotFoundError, RemoteError
from src.documents.document_renderer import DocumentKind, DocumentRenderer
from src.models.db_utils import row_to_record, status_patch
from src.models.decimal_wire import decimal_to_wire
from src.services.record_store import RecordStore
from src.services.share_composer import ShareComposer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["records"])

# Amounts leave the API as plain decimal strings
WIRE_ENCODERS = {Decimal: decimal_to_wire}


class RecordRow(BaseModel):
    """Writable columns of a stored record; absent keys are left untouched"""
    model_config = ConfigDict(extra="ignore")

    placa: Optional[str] = None
    cliente: Optional[str] = None
    modelo: Optional[str] = None
    trabajo: Optional[str] = None
    costo: Optional[Decimal] = None
    contacto: Optional[str] = None
    foto_url: Optional[str] = None
    estado: Optional[str] = None
    kilometraje: Optional[str] = None
    repuestos: Optional[str] = None
    codigo: Optional[str] = None


def _remote_failure(action: str, error: RemoteError) -> HTTPException:
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    logger.error(f"Error {action}: {error}")
    return HTTPException(status_code=502, detail=str(error))


async def _load_row(store: RecordStore, record_id: str) -> dict:
    try:
        row = await store.get(record_id)
    except RemoteError as e:
        raise _remote_failure(f"loading record {record_id}", e)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found")
    return row


@router.post("", status_code=201)
async def create_record(
    payload: RecordRow,
    store: RecordStore = Depends(get_record_store),
):
    """Insert a record row; the store assigns id and created_at"""
    try:
        record_id = await store.insert(payload.model_dump(exclude_unset=True))
    except RemoteError as e:
        raise _remote_failure("creating record", e)
    return {"id": record_id}


@router.get("")
async def list_records(store: RecordStore = Depends(get_record_store)):
    """All records, newest first"""
    try:
        rows = await store.list()
    except RemoteError as e:
        raise _remote_failure("listing records", e)
    return {"records": jsonable_encoder(rows, custom_encoder=WIRE_ENCODERS), "count": len(rows)}


@router.get("/{record_id}")
async def get_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    return jsonable_encoder(await _load_row(store, record_id), custom_encoder=WIRE_ENCODERS)


@router.patch("/{record_id}")
async def update_record(
    record_id: str,
    payload: RecordRow,
    store: RecordStore = Depends(get_record_store),
):
    """Update the columns present in the payload"""
    try:
        await store.update(record_id, payload.model_dump(exclude_unset=True))
    except RemoteError as e:
        raise _remote_failure(f"updating record {record_id}", e)
    return {"success": True, "id": record_id}


@router.delete("/{record_id}")
async def delete_record(record_id: str, store: RecordStore = Depends(get_record_store)):
    """Permanently delete a record"""
    try:
        await store.delete(record_id)
    except RemoteError as e:
        raise _remote_failure(f"deleting record {record_id}", e)
    return {"success": True, "id": record_id}


@router.post("/{record_id}/status/toggle")
async def toggle_record_status(record_id: str, store: RecordStore = Depends(get_record_store)):
    """Flip a record between in progress and done"""
    record = row_to_record(await _load_row(store, record_id))
    new_status = record.toggle_status()
    try:
        await store.update(record_id, status_patch(new_status))
    except RemoteError as e:
        raise _remote_failure(f"toggling status of {record_id}", e)
    return {"id": record_id, "estado": new_status.value}


@router.get("/{record_id}/pdf")
async def get_record_pdf(
    record_id: str,
    kind: DocumentKind = Query(DocumentKind.INTAKE_RECEIPT),
    store: RecordStore = Depends(get_record_store),
):
    """Receipt or service report PDF for a record"""
    record = row_to_record(await _load_row(store, record_id))
    document = DocumentRenderer().render(record, kind)
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"'
        }
    )


@router.get("/{record_id}/share")
async def get_record_share(record_id: str, store: RecordStore = Depends(get_record_store)):
    """Share message and messaging link for a record"""
    record = row_to_record(await _load_row(store, record_id))
    composer = ShareComposer()
    message = composer.compose(record)
    return {
        "title": message.title,
        "text": message.text,
        "link": composer.whatsapp_link(record.contact, message.text),
    }
