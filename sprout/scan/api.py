# -*- coding: utf-8 -*-
"""Scan — ingredient labels, restaurant menus and product alternatives."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..diet import check_ingredient, map_ingredient_status, parse_menu
from ..llm import client as llm
from ..ocr.uploads import ocr_upload
from ..ocr.vision import split_lines
from ..store import Store, get_store
from ..users.service import require_user
from .models import (
    AlternativeProductRequest,
    AlternativeProductResponse,
    IngredientsTextRequest,
    IngredientVerdict,
    MenuDish,
    MenuTextRequest,
    ScanIngredientsResponse,
    ScanMenuResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scan", tags=["Scan"])


def _prefs(user: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "dietLevel": user.get("dietLevel") or "vegan",
        "extraForbiddenTags": user.get("extraForbiddenTags") or [],
    }


def _classify_ingredients(user: Mapping[str, Any], ingredients: List[str]) -> ScanIngredientsResponse:
    """LLM labels each ingredient; the static diet tables overrule it when they forbid one."""
    try:
        rows = llm.classify_ingredients(_prefs(user), ingredients)
    except llm.LLMError as exc:
        logger.warning("ingredient classification failed: %s", exc)
        raise HTTPException(status_code=502, detail="Language model unavailable") from exc
    by_name = {row["ingredient"].lower(): row for row in rows}

    verdicts: List[IngredientVerdict] = []
    for name in ingredients:
        rule, substitutes = check_ingredient(user, name)
        row = by_name.get(name.lower())
        if not rule.allowed:
            verdicts.append(IngredientVerdict(
                name=name,
                status="not_allowed",
                reason="; ".join(rule.reasons),
                suggestions=substitutes or (row or {}).get("suggestions") or [],
            ))
        elif row:
            verdicts.append(IngredientVerdict(
                name=name,
                status=map_ingredient_status(row.get("allowed")),
                reason=row.get("reason") or "",
                suggestions=row.get("suggestions") or [],
            ))
        else:
            verdicts.append(IngredientVerdict(name=name, status="allowed"))

    return ScanIngredientsResponse(
        isConsumable=all(v.status != "not_allowed" for v in verdicts),
        ingredients=verdicts,
    )


@router.post("/ingredients", response_model=ScanIngredientsResponse, summary="OCR an ingredient label and check it")
def scan_ingredients(
    userId: Optional[str] = Query(default=None),
    image: UploadFile = File(...),
    store: Store = Depends(get_store),
):
    user = require_user(store, userId)
    text = ocr_upload(image)
    return _classify_ingredients(user, split_lines(text))


@router.post("/ingredients/text", response_model=ScanIngredientsResponse, summary="Check a typed ingredient list")
def scan_ingredients_text(request: IngredientsTextRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    return _classify_ingredients(user, split_lines(request.text))


def _menu_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _rule_dish(user: Mapping[str, Any], dish: Mapping[str, Any]) -> MenuDish:
    blocked: List[str] = []
    swaps: List[str] = []
    for ingredient in dish["ingredients"]:
        verdict, substitutes = check_ingredient(user, ingredient)
        if verdict.allowed:
            continue
        blocked.append(ingredient)
        if substitutes:
            swaps.append(f"swap {ingredient} for {substitutes[0]}")

    if not blocked:
        status, suggestion = "compatible", None
    elif len(swaps) == len(blocked):
        status, suggestion = "modifiable", "; ".join(swaps)
    else:
        status, suggestion = "incompatible", None
    return MenuDish(
        name=dish["name"],
        status=status,
        modificationSuggestion=suggestion,
        ingredients=list(dish["ingredients"]),
    )


def _classify_menu(user: Mapping[str, Any], menu_text: str) -> ScanMenuResponse:
    """``Dish: a, b`` lines are decided by the diet tables; bare dish names go to the LLM."""
    structured = parse_menu(menu_text)
    dishes = [_rule_dish(user, d) for d in structured]

    named = {d["name"] for d in structured}
    bare = [line for line in _menu_lines(menu_text) if ":" not in line and line not in named]
    if bare:
        try:
            rows = llm.classify_menu(_prefs(user), bare)
        except llm.LLMError as exc:
            logger.warning("menu classification failed: %s", exc)
            raise HTTPException(status_code=502, detail="Language model unavailable") from exc
        for row in rows:
            status = row["status"] if row["status"] in ("compatible", "modifiable", "incompatible") else "modifiable"
            dishes.append(MenuDish(name=row["name"], status=status, modificationSuggestion=row["modificationSuggestion"]))
    return ScanMenuResponse(dishes=dishes)


@router.post("/menu", response_model=ScanMenuResponse, summary="Check a menu (multipart image or JSON text)")
async def scan_menu(request: Request, userId: Optional[str] = Query(default=None), store: Store = Depends(get_store)):
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("image")
        user_id = userId or form.get("userId")
        if upload is not None and not isinstance(upload, str):
            menu_text = await run_in_threadpool(ocr_upload, upload)
        else:
            menu_text = form.get("menuText") or ""
    else:
        try:
            body = MenuTextRequest.model_validate(await request.json())
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="menuText or image is required") from exc
        user_id = userId or body.userId
        menu_text = body.menuText

    if not str(menu_text).strip():
        raise HTTPException(status_code=400, detail="menuText or image is required")
    user = await run_in_threadpool(require_user, store, user_id)
    return await run_in_threadpool(_classify_menu, user, str(menu_text))


@router.post("/alternative-product", response_model=AlternativeProductResponse, summary="Diet-friendly alternatives to a product")
def alternative_product(request: AlternativeProductRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    try:
        suggestions = llm.suggest_alternatives(_prefs(user), request.productType, request.context)
    except llm.LLMError as exc:
        logger.warning("alternative product lookup failed: %s", exc)
        raise HTTPException(status_code=502, detail="Language model unavailable") from exc
    return AlternativeProductResponse(suggestions=suggestions)
