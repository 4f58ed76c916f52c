# -*- coding: utf-8 -*-
"""Grocery — API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..ocr.uploads import ocr_upload
from ..ocr.vision import letters_only_lines, split_lines
from ..store import GroceryItemPatch, StorageError, Store, get_store
from ..users.service import require_user, resolve_user_id
from .models import GroceryItemCreateRequest, GroceryItemOut, GroceryItemUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grocery-list", tags=["Grocery"])


def _to_out(item: Dict[str, Any]) -> GroceryItemOut:
    owner = item.get("userId")
    return GroceryItemOut(
        id=str(item.get("_id") or item.get("id")),
        name=item.get("name") or "",
        category=item.get("category") or "Uncategorized",
        isChecked=bool(item.get("isChecked")),
        userId=str(owner) if owner is not None else None,
    )


def _add_lines(store: Store, user_id: str, lines: List[str]) -> List[GroceryItemOut]:
    created: List[GroceryItemOut] = []
    try:
        for line in lines:
            created.append(_to_out(store.grocery_items.create({"userId": user_id, "name": line})))
    except StorageError as exc:
        logger.exception("adding scanned grocery items failed after %d of %d", len(created), len(lines))
        raise HTTPException(status_code=500, detail="Failed to add grocery items") from exc
    return created


@router.get("", response_model=List[GroceryItemOut], summary="List a user's grocery items")
def list_items(userId: Optional[str] = Query(default=None), store: Store = Depends(get_store)):
    user_id = resolve_user_id(store, userId)
    return [_to_out(i) for i in store.grocery_items.find({"userId": user_id})]


@router.post("", response_model=GroceryItemOut, summary="Add a grocery item")
def add_item(request: GroceryItemCreateRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    try:
        item = store.grocery_items.create({
            "userId": user["_id"],
            "name": request.name,
            "category": request.category or "Uncategorized",
        })
    except StorageError as exc:
        logger.exception("add grocery item failed")
        raise HTTPException(status_code=500, detail="Failed to add grocery item") from exc
    return _to_out(item)


@router.patch("/{item_id}", response_model=GroceryItemOut, summary="Update or check off an item")
def update_item(item_id: str, request: GroceryItemUpdateRequest, store: Store = Depends(get_store)):
    patch = GroceryItemPatch(**request.model_dump(exclude_unset=True))
    try:
        item = store.grocery_items.find_by_id_and_update(item_id, patch)
    except StorageError as exc:
        logger.exception("update grocery item %s failed", item_id)
        raise HTTPException(status_code=500, detail="Failed to update grocery item") from exc
    if not item:
        raise HTTPException(status_code=404, detail="Grocery item not found")
    return _to_out(item)


@router.delete("/{item_id}", summary="Delete an item")
def delete_item(item_id: str, store: Store = Depends(get_store)):
    try:
        removed = store.grocery_items.find_by_id_and_delete(item_id)
    except StorageError as exc:
        logger.exception("delete grocery item %s failed", item_id)
        raise HTTPException(status_code=500, detail="Failed to delete grocery item") from exc
    if not removed:
        raise HTTPException(status_code=404, detail="Grocery item not found")
    return {"success": True, "id": item_id}


@router.post("/scan-fridge", response_model=List[GroceryItemOut], summary="OCR a fridge photo into items")
def scan_fridge(
    userId: Optional[str] = Query(default=None),
    image: UploadFile = File(...),
    store: Store = Depends(get_store),
):
    user = require_user(store, userId)
    text = ocr_upload(image)
    return _add_lines(store, user["_id"], split_lines(text))


@router.post("/scan-receipt", response_model=List[GroceryItemOut], summary="OCR a receipt into items")
def scan_receipt(
    userId: Optional[str] = Query(default=None),
    image: UploadFile = File(...),
    store: Store = Depends(get_store),
):
    user = require_user(store, userId)
    text = ocr_upload(image)
    return _add_lines(store, user["_id"], letters_only_lines(text))
