# -*- coding: utf-8 -*-
"""AI — free-text questions answered with the user's own context."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..llm import client as llm
from ..store import Store, get_store
from ..users.service import user_context
from .models import AskRequest, AskResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/ask", response_model=AskResponse, summary="Ask the Sprout assistant")
def ask(request: AskRequest, store: Store = Depends(get_store)):
    context = user_context(store, request.user_id)
    logger.info(
        "ai ask: user=%s diet=%s recipes=%d impact=%s",
        request.user_id,
        context["user"].get("dietLevel"),
        len(context["recipes"]),
        context["impact"] is not None,
    )
    try:
        answer = llm.answer_with_context(context, request.question)
    except llm.LLMError as exc:
        logger.warning("ai ask failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to get AI answer") from exc
    return AskResponse(answer=answer)
