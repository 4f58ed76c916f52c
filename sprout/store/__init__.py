# -*- coding: utf-8 -*-
"""
File-backed document store.

Each collection is one JSON array on disk; the API mirrors the small subset of
a document database the handlers need.
"""

from .backend import JsonFileBackend, StorageError
from .collection import Collection
from .domain import (
    DietLevel,
    ForestStage,
    GroceryItemPatch,
    GroceryItemStorage,
    RecipePatch,
    RecipeStorage,
    RecipeType,
    Store,
    UserImpactPatch,
    UserImpactStorage,
    UserPatch,
    UserStorage,
    get_store,
)
from .identity import new_id
from .matcher import matches, same_identifier

__all__ = [
    'Collection',
    'DietLevel',
    'ForestStage',
    'GroceryItemPatch',
    'GroceryItemStorage',
    'JsonFileBackend',
    'RecipePatch',
    'RecipeStorage',
    'RecipeType',
    'StorageError',
    'Store',
    'UserImpactPatch',
    'UserImpactStorage',
    'UserPatch',
    'UserStorage',
    'get_store',
    'matches',
    'new_id',
    'same_identifier',
]
