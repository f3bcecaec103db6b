from typing import Optional

from fastapi import APIRouter, File, UploadFile

from config import settings
from services.uploads import ALLOWED_EXTENSIONS, store_upload

router = APIRouter(prefix="/api", tags=["uploads"])


@router.get("/upload/limits")
async def upload_limits():
    """Size cap and the file types the client should offer in its picker."""
    return {
        "maxSizeBytes": settings.max_upload_bytes,
        "allowedExtensions": sorted(ALLOWED_EXTENSIONS),
    }


@router.post("/upload")
async def upload_identity_document(
    file: Optional[UploadFile] = File(None, description="Identity document (PDF, JPG or PNG)"),
):
    """Store one identity document; the returned URL goes into `identityFileUrl`."""
    stored = await store_upload(file, settings.upload_dir, settings.max_upload_bytes)
    return stored.model_dump()
