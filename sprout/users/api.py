# -*- coding: utf-8 -*-
"""Users — onboarding, profile, home summary and mission progress endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..diet import eating_style_to_diet_level, parse_restrictions
from ..impact.rules import MISSIONS, level_for, mission_xp, xp_to_next_level
from ..impact.service import add_xp
from ..store import StorageError, Store, UserPatch, get_store
from .models import (
    CompleteMissionRequest,
    HomeSummary,
    OnboardingRequest,
    ParseRestrictionsRequest,
    ParseRestrictionsResponse,
    ProfileUpdateRequest,
    UserProfile,
)
from .service import build_profile, impact_for, require_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post("/onboarding/profile", response_model=UserProfile, summary="Create a user and their impact record")
def create_profile(request: OnboardingRequest, store: Store = Depends(get_store)):
    try:
        user = store.users.create({
            "name": request.userName or "User",
            "dietLevel": eating_style_to_diet_level(request.eatingStyle),
            "extraForbiddenTags": request.dietaryRestrictions,
            "allergies": request.allergies,
            "preferredCuisines": request.cuisinePreferences,
            "cookingStylePreferences": request.cookingStylePreferences,
            "sproutName": request.sproutName or "Bud",
        })
        impact, _ = store.impacts.find_one_or_create({"user_id": user["_id"]})
    except StorageError as exc:
        logger.exception("create profile failed")
        raise HTTPException(status_code=500, detail="Failed to create profile") from exc
    return build_profile(user, impact)


@router.get("/profile", response_model=UserProfile, summary="Get a profile (default user when userId is omitted)")
def get_profile(userId: Optional[str] = Query(default=None), store: Store = Depends(get_store)):
    user = require_user(store, userId)
    return build_profile(user, impact_for(store, user["_id"]))


@router.patch("/profile", response_model=UserProfile, summary="Update profile fields")
def update_profile(request: ProfileUpdateRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.id)
    fields = request.model_dump(exclude_unset=True)
    patch = UserPatch()
    if "userName" in fields:
        patch.name = request.userName
    if request.eatingStyle is not None:
        patch.dietLevel = eating_style_to_diet_level(request.eatingStyle)
    if "dietaryRestrictions" in fields:
        patch.extraForbiddenTags = request.dietaryRestrictions or []
    if "allergies" in fields:
        patch.allergies = request.allergies or []
    if "cuisinePreferences" in fields:
        patch.preferredCuisines = request.cuisinePreferences or []
    if "cookingStylePreferences" in fields:
        patch.cookingStylePreferences = request.cookingStylePreferences or []
    if "sproutName" in fields:
        patch.sproutName = request.sproutName

    try:
        updated = store.users.find_by_id_and_update(user["_id"], patch)
    except StorageError as exc:
        logger.exception("update profile failed")
        raise HTTPException(status_code=500, detail="Failed to update profile") from exc
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return build_profile(updated, impact_for(store, updated["_id"]))


@router.post("/profile/parse-restrictions", response_model=ParseRestrictionsResponse, summary="Detect common restrictions in free text")
def parse_profile_restrictions(request: ParseRestrictionsRequest):
    return ParseRestrictionsResponse(restrictions=parse_restrictions(request.text))


@router.get("/home/summary", response_model=HomeSummary, summary="Level, XP and today's missions")
def home_summary(userId: Optional[str] = Query(default=None), store: Store = Depends(get_store)):
    user = require_user(store, userId)
    impact = impact_for(store, user["_id"])
    xp = int(impact.get("xp") or 0)
    return HomeSummary(
        level=level_for(xp),
        xp=xp,
        xpToNextLevel=xp_to_next_level(xp),
        coins=int(impact.get("coins") or 0),
        streakDays=int(impact.get("streak_days") or 0),
        missions=MISSIONS,
    )


@router.post("/progress/complete-mission", response_model=UserProfile, summary="Award mission XP")
def complete_mission(request: CompleteMissionRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    try:
        impact = add_xp(store, user["_id"], mission_xp(request.missionId))
    except StorageError as exc:
        logger.exception("complete mission failed")
        raise HTTPException(status_code=500, detail="Failed to complete mission") from exc
    return build_profile(user, impact)
