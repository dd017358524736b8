"""API routes for photo storage"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
import logging

from api.dependencies import get_record_store
from src.errors import RemoteError
from src.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])


@router.post("/images", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    store: RecordStore = Depends(get_record_store),
):
    """Store an (already compressed) photo under its generated name"""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")

    try:
        public_url = await store.upload_binary(content, file.filename)
    except RemoteError as e:
        logger.error(f"Error uploading image {file.filename}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {"public_url": public_url, "name": file.filename, "size": len(content)}
