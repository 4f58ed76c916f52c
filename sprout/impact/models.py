# -*- coding: utf-8 -*-
"""Impact — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..store.domain import ForestStage


class ImpactStats(BaseModel):
    user_id: Optional[str] = None
    total_meals_logged: int = 0
    xp: int = 0
    coins: int = 0
    forest_stage: ForestStage = ForestStage.SEED
    streak_days: int = 0
    last_activity_date: Optional[str] = None


class ImpactUpdateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class ImpactUpdateResponse(BaseModel):
    xp_awarded: int
    meal_xp: int
    streak_bonus: int
    total_meals_logged: int
    xp: int
    streak_days: int
    forest_stage: ForestStage


class ProgressSnapshot(BaseModel):
    xp: int
    forest_stage: ForestStage
