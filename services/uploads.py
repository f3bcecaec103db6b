"""
Local-disk store for identity documents.

Files land in the configured upload directory under a random name that keeps
the original suffix; the original client filename is only echoed back for display.
"""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from exceptions import NoFileProvided, PayloadTooLarge
from schemas.application import UploadResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE_BYTES = 5 * 1024 * 1024
# Advisory only: clients filter on these, the server does not
ALLOWED_EXTENSIONS = {".pdf", ".jpg", ".png"}
URL_PREFIX = "/uploads"

_CHUNK_SIZE = 64 * 1024


def ensure_upload_dir(upload_dir: str | Path) -> Path:
    path = Path(upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _stored_name(original: str) -> str:
    suffix = Path(original).suffix.lower()
    if not suffix.isascii() or not suffix[1:].isalnum():
        suffix = ""
    return f"{uuid.uuid4().hex}{suffix}"


async def store_upload(
    file: Optional[UploadFile],
    upload_dir: str | Path,
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
) -> UploadResponse:
    """Stream `file` to disk, enforcing `max_size_bytes`; return its URL and original name."""
    if file is None or not file.filename:
        raise NoFileProvided()

    target_dir = ensure_upload_dir(upload_dir)
    stored_name = _stored_name(file.filename)
    target = target_dir / stored_name
    written = 0
    try:
        with target.open("wb") as out:
            while chunk := await file.read(_CHUNK_SIZE):
                written += len(chunk)
                if written > max_size_bytes:
                    raise PayloadTooLarge(max_size_bytes)
                out.write(chunk)
    except PayloadTooLarge:
        target.unlink(missing_ok=True)
        logger.warning("Rejected upload %r: larger than %s bytes", file.filename, max_size_bytes)
        raise
    finally:
        await file.close()

    logger.info("Stored upload %r as %s (%s bytes)", file.filename, stored_name, written)
    return UploadResponse(url=f"{URL_PREFIX}/{stored_name}", filename=file.filename)
