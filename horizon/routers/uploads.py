import logging
import time
import uuid
from typing import List, Optional

from azure.core.exceptions import AzureError
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from .. import schemas
from ..auth import require_admin
from ..config import Settings, get_settings
from ..storage_service import StorageNotConfigured

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Images"])

STORAGE_ERRORS = (StorageNotConfigured, AzureError)


def get_storage(request: Request):
    return request.app.state.storage


def unique_file_name(original: str) -> str:
    """<epoch-ms>-<random>.<ext>"""
    ext = original.rsplit(".", 1)[-1].lower() if "." in original else "bin"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}.{ext}"


@router.post("/upload", response_model=schemas.UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    bucket: Optional[str] = Form(None),
    folder: Optional[str] = Form(None),
    storage=Depends(get_storage),
    settings: Settings = Depends(get_settings),
    admin: dict = Depends(require_admin),
):
    """Store an image under <folder>/<unique name> in the bucket"""
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    data = await image.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(data) > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise HTTPException(status_code=400, detail=f"File too large, maximum size is {limit_mb}MB")

    bucket = bucket or settings.STORAGE_DEFAULT_BUCKET
    folder = folder or settings.STORAGE_DEFAULT_FOLDER
    file_name = unique_file_name(image.filename)

    try:
        result = await run_in_threadpool(
            storage.upload, bucket, f"{folder}/{file_name}", data, image.content_type
        )
    except STORAGE_ERRORS as e:
        logger.error("Upload to %s failed: %s", bucket, e)
        raise HTTPException(status_code=500, detail=f"Upload failed: {e}")

    return {"url": result["url"], "path": result["path"], "fileName": file_name}


@router.get("/images", response_model=List[schemas.StoredImage])
async def list_images(
    bucket: Optional[str] = Query(None),
    folder: Optional[str] = Query(None),
    storage=Depends(get_storage),
    settings: Settings = Depends(get_settings),
    admin: dict = Depends(require_admin),
):
    try:
        return await run_in_threadpool(
            storage.list,
            bucket or settings.STORAGE_DEFAULT_BUCKET,
            folder or settings.STORAGE_DEFAULT_FOLDER,
        )
    except STORAGE_ERRORS as e:
        logger.error("Listing images failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to list images")


@router.delete("/images")
async def delete_image(
    body: schemas.ImageDeleteIn,
    storage=Depends(get_storage),
    settings: Settings = Depends(get_settings),
    admin: dict = Depends(require_admin),
):
    if not body.path:
        raise HTTPException(status_code=400, detail="Path is required")

    try:
        await run_in_threadpool(storage.delete, body.bucket or settings.STORAGE_DEFAULT_BUCKET, body.path)
    except STORAGE_ERRORS as e:
        logger.error("Deleting %s failed: %s", body.path, e)
        raise HTTPException(status_code=500, detail="Failed to delete image")
    return {"ok": True}
