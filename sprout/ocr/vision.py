# -*- coding: utf-8 -*-
"""OCR — text recognition through a vision-capable chat model."""

from __future__ import annotations

import base64
import logging
import re
from typing import Dict, List

from ..config import settings
from ..llm.client import LLMError, chat

logger = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[\n,]")
_NO_TEXT = "NO_TEXT"


class OCRError(RuntimeError):
    """The image could not be transcribed."""


def _data_url(mime: str, image_bytes: bytes) -> str:
    b64 = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime};base64,{b64}"


def recognize(image_bytes: bytes, mime: str = "image/jpeg") -> str:
    """Return the text visible in the image ('' when there is none)."""
    if not image_bytes:
        raise OCRError("empty image")
    messages: List[Dict[str, object]] = [
        {
            "role": "system",
            "content": (
                "You are an OCR engine. Transcribe the text in the image exactly as printed, "
                "line by line, without commentary or formatting. "
                f"If there is no readable text, answer {_NO_TEXT}."
            ),
        },
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Transcribe this image."},
                {"type": "image_url", "image_url": {"url": _data_url(mime, image_bytes)}},
            ],
        },
    ]
    try:
        text = chat(messages, model=settings.ocr_model, timeout=settings.ocr_timeout, temperature=0.0)
    except LLMError as exc:
        raise OCRError(f"OCR call failed: {exc}") from exc

    text = text.strip()
    if text.upper() == _NO_TEXT:
        logger.info("ocr: no readable text in %d-byte image", len(image_bytes))
        return ""
    return text


def split_lines(text: str) -> List[str]:
    """OCR text -> candidate item names (split on newlines and commas)."""
    return [part.strip() for part in _SPLIT_RE.split(text or "") if part.strip()]


def letters_only_lines(text: str) -> List[str]:
    """Receipt cleanup: keep letters/spaces, one candidate per line, drop 1-char noise."""
    cleaned = re.sub(r"[^a-zA-Z\s]", " ", text or "")
    out: List[str] = []
    for line in cleaned.splitlines():
        line = re.sub(r"\s+", " ", line).strip()
        if len(line) > 1:
            out.append(line)
    return out
