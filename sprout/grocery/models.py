# -*- coding: utf-8 -*-
"""Grocery — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class GroceryItemOut(BaseModel):
    id: str
    name: str
    category: str = "Uncategorized"
    isChecked: bool = False
    userId: Optional[str] = None


class GroceryItemCreateRequest(BaseModel):
    userId: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: Optional[str] = None


class GroceryItemUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    isChecked: Optional[bool] = None

    @field_validator("name", "category", "isChecked")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value
