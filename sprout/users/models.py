# -*- coding: utf-8 -*-
"""Users — Pydantic models (mobile client camelCase shapes)."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class UserProfile(BaseModel):
    id: str
    userName: str = "User"
    eatingStyle: str
    dietaryRestrictions: List[str] = []
    cuisinePreferences: List[str] = []
    cookingStylePreferences: List[str] = []
    sproutName: str = "Bud"
    level: int = 1
    xp: int = 0
    xpToNextLevel: int = 100
    coins: int = 0
    streakDays: int = 0


class OnboardingRequest(BaseModel):
    eatingStyle: str = Field(..., min_length=1, description="Client label (e.g. 'Vegan') or diet level")
    userName: Optional[str] = None
    dietaryRestrictions: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    cuisinePreferences: List[str] = Field(default_factory=list)
    cookingStylePreferences: List[str] = Field(default_factory=list)
    sproutName: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    id: Optional[str] = None
    userName: Optional[str] = None
    eatingStyle: Optional[str] = None
    dietaryRestrictions: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    cuisinePreferences: Optional[List[str]] = None
    cookingStylePreferences: Optional[List[str]] = None
    sproutName: Optional[str] = None

    @field_validator("userName", "eatingStyle", "sproutName")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ParseRestrictionsRequest(BaseModel):
    userId: Optional[str] = None
    text: str = Field(..., min_length=1)


class ParseRestrictionsResponse(BaseModel):
    restrictions: List[str]


class Mission(BaseModel):
    id: str
    title: str
    xpReward: int
    coinReward: int
    isCompleted: bool = False


class HomeSummary(BaseModel):
    level: int
    xp: int
    xpToNextLevel: int
    coins: int
    streakDays: int
    missions: List[Mission]


class CompleteMissionRequest(BaseModel):
    userId: Optional[str] = None
    missionId: str = Field(..., min_length=1)
