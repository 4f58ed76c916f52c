# -*- coding: utf-8 -*-
"""Store — the four Sprout collections and their typed patches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import ClassVar, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import settings
from .backend import JsonFileBackend
from .collection import Clock, Collection


class DietLevel(str, Enum):
    vegan = "vegan"
    vegetarian = "vegetarian"
    pescatarian = "pescatarian"
    ovo = "ovo"
    lacto = "lacto"
    lacto_ovo = "lacto_ovo"
    flexitarian = "flexitarian"


class ForestStage(str, Enum):
    SEED = "SEED"
    SPROUT = "SPROUT"
    SAPLING = "SAPLING"
    FOREST = "FOREST"
    ANCIENT_FOREST = "ANCIENT_FOREST"


class RecipeType(str, Enum):
    simplified = "simplified"
    veganized = "veganized"


class RecipeIngredient(BaseModel):
    name: str
    amount: Optional[str] = None
    unit: Optional[str] = None


class _Patch(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    # Fields that may be set to null; every other field rejects an explicit null.
    nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self) -> "_Patch":
        nulls = sorted(k for k in self.model_fields_set if k not in self.nullable and getattr(self, k) is None)
        if nulls:
            raise ValueError(f"cannot be null: {', '.join(nulls)}")
        return self


class UserPatch(_Patch):
    name: Optional[str] = None
    dietLevel: Optional[DietLevel] = None
    extraForbiddenTags: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    preferredCuisines: Optional[List[str]] = None
    cookingStylePreferences: Optional[List[str]] = None
    sproutName: Optional[str] = None


class UserImpactPatch(_Patch):
    nullable = frozenset({"last_activity_date"})

    total_meals_logged: Optional[int] = Field(None, ge=0)
    xp: Optional[int] = Field(None, ge=0)
    coins: Optional[int] = Field(None, ge=0)
    forest_stage: Optional[ForestStage] = None
    streak_days: Optional[int] = Field(None, ge=0)
    last_activity_date: Optional[str] = None


class RecipePatch(_Patch):
    nullable = frozenset({"substitutionMap"})

    title: Optional[str] = None
    tags: Optional[List[str]] = None
    duration: Optional[str] = None
    ingredients: Optional[List[RecipeIngredient]] = None
    steps: Optional[List[str]] = None
    previewImageUrl: Optional[str] = None
    originalPrompt: Optional[str] = None
    type: Optional[RecipeType] = None
    substitutionMap: Optional[Dict[str, str]] = None


class GroceryItemPatch(_Patch):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    isChecked: Optional[bool] = None


class UserStorage(Collection):
    def __init__(self, backend: JsonFileBackend, clock: Optional[Clock] = None) -> None:
        super().__init__(
            "users",
            backend,
            filter_fields={"name", "dietLevel", "sproutName"},
            patch_model=UserPatch,
            defaults={
                "extraForbiddenTags": [],
                "allergies": [],
                "preferredCuisines": [],
                "cookingStylePreferences": [],
            },
            clock=clock,
        )


class UserImpactStorage(Collection):
    def __init__(self, backend: JsonFileBackend, clock: Optional[Clock] = None) -> None:
        super().__init__(
            "userImpact",
            backend,
            owner_field="user_id",
            filter_fields={"user_id", "forest_stage"},
            patch_model=UserImpactPatch,
            one_per_owner=True,
            defaults={
                "total_meals_logged": 0,
                "xp": 0,
                "coins": 0,
                "forest_stage": ForestStage.SEED.value,
                "streak_days": 0,
                "last_activity_date": None,
            },
            clock=clock,
        )


class RecipeStorage(Collection):
    def __init__(self, backend: JsonFileBackend, clock: Optional[Clock] = None) -> None:
        super().__init__(
            "recipes",
            backend,
            owner_field="userId",
            filter_fields={"userId", "type", "title"},
            patch_model=RecipePatch,
            defaults={
                "userId": None,
                "tags": [],
                "duration": "",
                "ingredients": [],
                "steps": [],
                "previewImageUrl": "",
                "originalPrompt": "",
                "type": RecipeType.simplified.value,
                "substitutionMap": None,
            },
            track_updates=True,
            clock=clock,
        )


class GroceryItemStorage(Collection):
    def __init__(self, backend: JsonFileBackend, clock: Optional[Clock] = None) -> None:
        super().__init__(
            "groceryItems",
            backend,
            owner_field="userId",
            filter_fields={"userId", "name", "category", "isChecked"},
            patch_model=GroceryItemPatch,
            defaults={"category": "Uncategorized", "isChecked": False},
            track_updates=True,
            clock=clock,
        )


@dataclass(frozen=True)
class Store:
    users: UserStorage
    impacts: UserImpactStorage
    recipes: RecipeStorage
    grocery_items: GroceryItemStorage

    @classmethod
    def open(cls, data_root: Path, clock: Optional[Clock] = None) -> "Store":
        backend = JsonFileBackend(data_root)
        return cls(
            users=UserStorage(backend, clock),
            impacts=UserImpactStorage(backend, clock),
            recipes=RecipeStorage(backend, clock),
            grocery_items=GroceryItemStorage(backend, clock),
        )


_stores: Dict[Path, Store] = {}
_stores_guard = Lock()


def get_store() -> Store:
    """FastAPI dependency: the store rooted at ``settings.data_root``."""
    root = Path(settings.data_root)
    with _stores_guard:
        store = _stores.get(root)
        if store is None:
            store = Store.open(root)
            _stores[root] = store
        return store
