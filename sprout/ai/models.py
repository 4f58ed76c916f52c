# -*- coding: utf-8 -*-
"""AI — Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)


class AskResponse(BaseModel):
    answer: str
