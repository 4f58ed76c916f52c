# -*- coding: utf-8 -*-
"""OCR — reading multipart image uploads and turning them into text."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, UploadFile

from ..config import settings
from .vision import OCRError, recognize

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 256


def read_image_upload(upload: Optional[UploadFile]) -> bytes:
    """Read an uploaded image into memory, enforcing ``SPROUT_MAX_UPLOAD_MB``."""
    if upload is None:
        raise HTTPException(status_code=400, detail="image required")

    max_bytes = settings.max_upload_bytes
    chunks = []
    size = 0
    try:
        while True:
            chunk = upload.file.read(_CHUNK)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                raise HTTPException(status_code=400, detail=f"File too large (> {settings.max_upload_mb} MB)")
            chunks.append(chunk)
    finally:
        upload.file.close()

    if not size:
        raise HTTPException(status_code=400, detail="image required")
    return b"".join(chunks)


def ocr_upload(upload: Optional[UploadFile]) -> str:
    """Uploaded image -> recognized text; OCR failures become 502."""
    image_bytes = read_image_upload(upload)
    mime = (upload.content_type if upload else None) or "image/jpeg"
    if not mime.startswith("image/"):
        mime = "image/jpeg"
    try:
        return recognize(image_bytes, mime=mime)
    except OCRError as exc:
        logger.warning("ocr failed: %s", exc)
        raise HTTPException(status_code=502, detail="Text recognition failed") from exc
