# -*- coding: utf-8 -*-
"""Impact — API endpoints (meal logging, streaks, forest stage)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..store import StorageError, Store, get_store
from .models import ImpactStats, ImpactUpdateRequest, ImpactUpdateResponse
from .service import log_meal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/impact", tags=["Impact"])


@router.get("/{user_id}", response_model=ImpactStats, summary="Impact stats for a user")
def get_impact(user_id: str, store: Store = Depends(get_store)):
    if not store.users.find_by_id(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    impact = store.impacts.find_one({"user_id": user_id})
    if not impact:
        return ImpactStats(user_id=user_id)
    return ImpactStats.model_validate(impact)


@router.post("/update", response_model=ImpactUpdateResponse, summary="Log a meal (+10 XP, +20 per streak day)")
def update_impact(request: ImpactUpdateRequest, store: Store = Depends(get_store)):
    if not store.users.find_by_id(request.user_id):
        raise HTTPException(status_code=404, detail="User not found")
    try:
        impact, award = log_meal(store, request.user_id)
    except StorageError as exc:
        logger.exception("impact update failed for %s", request.user_id)
        raise HTTPException(status_code=500, detail="Failed to update impact") from exc

    return ImpactUpdateResponse(
        xp_awarded=award.total,
        meal_xp=award.meal_xp,
        streak_bonus=award.streak_bonus,
        total_meals_logged=impact["total_meals_logged"],
        xp=impact["xp"],
        streak_days=impact["streak_days"],
        forest_stage=impact["forest_stage"],
    )
