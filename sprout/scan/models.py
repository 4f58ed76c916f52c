# -*- coding: utf-8 -*-
"""Scan — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

IngredientStatus = Literal["allowed", "not_allowed", "ambiguous"]
DishStatus = Literal["compatible", "modifiable", "incompatible"]


class IngredientVerdict(BaseModel):
    name: str
    status: IngredientStatus
    reason: str = ""
    suggestions: List[str] = []


class ScanIngredientsResponse(BaseModel):
    success: bool = True
    isConsumable: bool
    ingredients: List[IngredientVerdict]


class IngredientsTextRequest(BaseModel):
    userId: Optional[str] = None
    text: str = Field(..., min_length=1)


class MenuDish(BaseModel):
    name: str
    status: DishStatus
    modificationSuggestion: Optional[str] = None
    ingredients: List[str] = []


class ScanMenuResponse(BaseModel):
    dishes: List[MenuDish]


class MenuTextRequest(BaseModel):
    userId: Optional[str] = None
    menuText: str = Field(..., min_length=1)


class AlternativeProductRequest(BaseModel):
    userId: Optional[str] = None
    productType: str = Field(..., min_length=1)
    context: Optional[str] = None


class AlternativeProductResponse(BaseModel):
    suggestions: List[str]
