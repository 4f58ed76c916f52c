# -*- coding: utf-8 -*-
"""Users — default-user resolution, profile shaping and AI context."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException

from ..config import settings
from ..diet import diet_level_to_eating_style
from ..impact.rules import level_for, xp_to_next_level
from ..store import Store
from .models import UserProfile


def resolve_user_id(store: Store, requested: Optional[str]) -> str:
    """Explicit id, then the configured default user id, then the configured sprout name."""
    if requested:
        return str(requested)
    if settings.default_user_id:
        return settings.default_user_id
    if settings.default_sprout_name:
        user = store.users.find_one({"sproutName": settings.default_sprout_name})
        if user:
            return str(user["_id"])
    raise HTTPException(status_code=400, detail="userId required")


def require_user(store: Store, requested: Optional[str]) -> Dict[str, Any]:
    user_id = resolve_user_id(store, requested)
    user = store.users.find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def impact_for(store: Store, user_id: str) -> Dict[str, Any]:
    """The user's impact record, or zeroed stats when none exists yet (not persisted)."""
    impact = store.impacts.find_one({"user_id": user_id})
    if impact:
        return impact
    return {"user_id": user_id, "xp": 0, "coins": 0, "streak_days": 0, "total_meals_logged": 0, "forest_stage": "SEED"}


def build_profile(user: Dict[str, Any], impact: Optional[Dict[str, Any]]) -> UserProfile:
    impact = impact or {}
    xp = int(impact.get("xp") or 0)
    return UserProfile(
        id=str(user.get("_id") or user.get("id")),
        userName=user.get("name") or "User",
        eatingStyle=diet_level_to_eating_style(user.get("dietLevel")),
        dietaryRestrictions=list(user.get("extraForbiddenTags") or []),
        cuisinePreferences=list(user.get("preferredCuisines") or []),
        cookingStylePreferences=list(user.get("cookingStylePreferences") or []),
        sproutName=user.get("sproutName") or "Bud",
        level=level_for(xp),
        xp=xp,
        xpToNextLevel=xp_to_next_level(xp),
        coins=int(impact.get("coins") or 0),
        streakDays=int(impact.get("streak_days") or 0),
    )


def user_context(store: Store, user_id: Optional[str]) -> Dict[str, Any]:
    """What the assistant is told about a user: diet preferences, saved recipes, impact."""
    user = store.users.find_by_id(user_id) if user_id else None
    if not user:
        return {
            "user": {"dietLevel": "flexitarian", "extraForbiddenTags": []},
            "recipes": [],
            "impact": None,
        }
    recipes = store.recipes.find({"userId": user_id})
    impact = store.impacts.find_one({"user_id": user_id})
    return {
        "user": {
            "dietLevel": (user.get("dietLevel") or "flexitarian").lower(),
            "extraForbiddenTags": user.get("extraForbiddenTags") or [],
            "allergies": user.get("allergies") or [],
            "preferredCuisines": user.get("preferredCuisines") or [],
            "cookingStylePreferences": user.get("cookingStylePreferences") or [],
        },
        "recipes": [r.get("title") for r in recipes if r.get("title")],
        "impact": {
            "xp": impact.get("xp", 0),
            "streak_days": impact.get("streak_days", 0),
            "total_meals_logged": impact.get("total_meals_logged", 0),
            "forest_stage": impact.get("forest_stage", "SEED"),
        } if impact else None,
    }
