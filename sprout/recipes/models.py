# -*- coding: utf-8 -*-
"""Recipes — Pydantic models."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..impact.models import ProgressSnapshot
from ..store.domain import RecipeIngredient, RecipeType


class RecipeOut(BaseModel):
    id: str
    userId: Optional[str] = None
    title: str
    tags: List[str] = []
    duration: str = ""
    ingredients: List[RecipeIngredient] = []
    steps: List[str] = []
    previewImageUrl: str = ""
    originalPrompt: Optional[str] = None
    type: RecipeType = RecipeType.simplified
    substitutionMap: Optional[Dict[str, str]] = None


class GenerateRecipesRequest(BaseModel):
    userId: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    prompt: Optional[str] = None


class SaveRecipeRequest(BaseModel):
    userId: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    duration: str = ""
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    previewImageUrl: str = ""
    originalPrompt: str = ""
    type: RecipeType = RecipeType.simplified
    substitutionMap: Optional[Dict[str, str]] = None


class VeganizeRequest(BaseModel):
    userId: Optional[str] = None
    inputText: str = Field(..., min_length=1)


class FromIngredientsRequest(BaseModel):
    ingredients: List[str] = Field(default_factory=list)
    user_id: Optional[str] = None


class FromIngredientsResponse(BaseModel):
    recipes: List[dict]
    progress: Optional[ProgressSnapshot] = None


class AnalyzeRequest(BaseModel):
    userID: Optional[str] = None
    recipe: str = Field(..., min_length=1)


class ProblemIngredient(BaseModel):
    original: str
    suggestions: List[str] = []


class AnalyzeResponse(BaseModel):
    success: bool = True
    violatesCount: int
    problematicIngredients: List[ProblemIngredient]


class Substitution(BaseModel):
    original: str = Field(..., min_length=1)
    substitute: str = Field(..., min_length=1)


class RecipeText(BaseModel):
    text: str = Field(..., min_length=1)


class CommitRequest(BaseModel):
    recipe: RecipeText
    chosenSubs: List[Substitution]


class AdaptedRecipe(BaseModel):
    ingredients: List[Substitution]
    text: str


class CommitResponse(BaseModel):
    success: bool = True
    adaptedRecipe: AdaptedRecipe
