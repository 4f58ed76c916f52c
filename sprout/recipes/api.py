# -*- coding: utf-8 -*-
"""Recipes — generation, saving, veganizing and "cook with this" endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..diet import check_ingredient, substitutes_for
from ..impact.models import ProgressSnapshot
from ..impact.rules import COOK_WITH_THIS_XP
from ..impact.service import add_xp
from ..llm import client as llm
from ..store import RecipeType, StorageError, Store, get_store
from ..users.service import require_user, resolve_user_id
from .models import (
    AdaptedRecipe,
    AnalyzeRequest,
    AnalyzeResponse,
    CommitRequest,
    CommitResponse,
    FromIngredientsRequest,
    FromIngredientsResponse,
    GenerateRecipesRequest,
    ProblemIngredient,
    RecipeOut,
    SaveRecipeRequest,
    VeganizeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["Recipes"])
veganize_router = APIRouter(prefix="/veganize", tags=["Recipes"])

_HEADING_RE = re.compile(r"^(recipe|ingredients|instructions|method|steps?):?$", re.IGNORECASE)


def _to_out(recipe: Dict[str, Any]) -> RecipeOut:
    owner = recipe.get("userId")
    return RecipeOut(
        id=str(recipe.get("_id") or recipe.get("id")),
        userId=str(owner) if owner is not None else None,
        title=recipe.get("title") or "Untitled",
        tags=recipe.get("tags") or [],
        duration=recipe.get("duration") or "",
        ingredients=recipe.get("ingredients") or [],
        steps=recipe.get("steps") or [],
        previewImageUrl=recipe.get("previewImageUrl") or "",
        originalPrompt=recipe.get("originalPrompt") or None,
        type=recipe.get("type") or RecipeType.simplified,
        substitutionMap=recipe.get("substitutionMap") or None,
    )


def _prefs(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "dietLevel": user.get("dietLevel") or "vegan",
        "extraForbiddenTags": user.get("extraForbiddenTags") or [],
    }


def _steps_from_text(text: str) -> List[str]:
    lines = [line.strip() for line in re.split(r"\n+", text or "")]
    steps = [line for line in lines if line and not _HEADING_RE.match(line)]
    return steps or [text]


def _llm_or_502(exc: llm.LLMError, what: str) -> HTTPException:
    logger.warning("%s: LLM call failed: %s", what, exc)
    return HTTPException(status_code=502, detail=f"Language model unavailable: {what} failed")


@router.post("/generate", response_model=List[RecipeOut], summary="Generate and save three recipes")
def generate_recipes(request: GenerateRecipesRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    user_id = user["_id"]

    ingredients = [i for i in request.ingredients if i and i.strip()]
    if not ingredients:
        ingredients = [g["name"] for g in store.grocery_items.find({"userId": user_id}) if g.get("name")]
    if not ingredients:
        raise HTTPException(
            status_code=400,
            detail="No ingredients available. Please add items to your grocery list or provide ingredients.",
        )

    try:
        generated = llm.generate_recipes(ingredients, 3, prefs=_prefs(user))
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "recipe generation") from exc

    saved: List[RecipeOut] = []
    try:
        for recipe in generated:
            saved.append(_to_out(store.recipes.create({
                **recipe,
                "userId": user_id,
                "originalPrompt": request.prompt or "",
                "type": RecipeType.simplified.value,
            })))
    except StorageError as exc:
        logger.exception("saving generated recipes failed")
        raise HTTPException(status_code=500, detail="Failed to generate recipes") from exc
    return saved


@router.post("/save", response_model=RecipeOut, summary="Save a recipe")
def save_recipe(request: SaveRecipeRequest, store: Store = Depends(get_store)):
    try:
        recipe = store.recipes.create(request.model_dump(mode="json"))
    except StorageError as exc:
        logger.exception("save recipe failed")
        raise HTTPException(status_code=500, detail="Failed to save recipe") from exc
    return _to_out(recipe)


@router.post("/veganize", response_model=RecipeOut, summary="Adapt a free-text recipe to the user's diet and save it")
def veganize_recipe(request: VeganizeRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userId)
    diet_level = user.get("dietLevel") or "vegan"

    try:
        extracted = llm.extract_ingredients(request.inputText)
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "ingredient extraction") from exc

    substitutions: List[Dict[str, str]] = []
    substitution_map: Dict[str, str] = {}
    ingredients: List[Dict[str, Optional[str]]] = []
    for name in extracted:
        subs = substitutes_for(name, diet_level)
        if subs:
            substitutions.append({"original": name, "substitute": subs[0]})
            substitution_map[name] = subs[0]
        ingredients.append({"name": subs[0] if subs else name, "amount": None, "unit": None})

    try:
        rewritten = llm.rewrite_recipe_steps(substitutions, request.inputText)
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "recipe rewrite") from exc

    try:
        recipe = store.recipes.create({
            "userId": user["_id"],
            "title": "Veganized Recipe",
            "tags": ["veganized"],
            "duration": "30 min",
            "ingredients": ingredients,
            "steps": _steps_from_text(rewritten),
            "originalPrompt": request.inputText,
            "type": RecipeType.veganized.value,
            "substitutionMap": substitution_map,
        })
    except StorageError as exc:
        logger.exception("save veganized recipe failed")
        raise HTTPException(status_code=500, detail="Failed to veganize recipe") from exc
    return _to_out(recipe)


@router.get("/saved", response_model=List[RecipeOut], summary="List a user's saved recipes")
def saved_recipes(userId: Optional[str] = Query(default=None), store: Store = Depends(get_store)):
    user_id = resolve_user_id(store, userId)
    return [_to_out(r) for r in store.recipes.find({"userId": user_id})]


@router.post("/from-ingredients", response_model=FromIngredientsResponse, summary="Cook with this (+5 XP)")
def cook_with_this(request: FromIngredientsRequest, store: Store = Depends(get_store)):
    try:
        recipes = llm.generate_recipes(request.ingredients, 3)
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "recipe generation") from exc

    progress = None
    if request.user_id:
        try:
            impact = add_xp(store, request.user_id, COOK_WITH_THIS_XP)
        except StorageError as exc:
            logger.exception("cook-with-this xp award failed")
            raise HTTPException(status_code=500, detail="Failed to record progress") from exc
        progress = ProgressSnapshot(xp=impact["xp"], forest_stage=impact["forest_stage"])
    return FromIngredientsResponse(recipes=recipes, progress=progress)


@router.get("/{recipe_id}", response_model=RecipeOut, summary="Get one recipe")
def get_recipe(recipe_id: str, store: Store = Depends(get_store)):
    recipe = store.recipes.find_by_id(recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _to_out(recipe)


@router.delete("/{recipe_id}", summary="Delete a recipe")
def delete_recipe(recipe_id: str, store: Store = Depends(get_store)):
    try:
        removed = store.recipes.find_by_id_and_delete(recipe_id)
    except StorageError as exc:
        logger.exception("delete recipe %s failed", recipe_id)
        raise HTTPException(status_code=500, detail="Failed to delete recipe") from exc
    if not removed:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"success": True, "id": recipe_id}


# ---------- Two-step veganize ----------

@veganize_router.post("/analyze", response_model=AnalyzeResponse, summary="Find ingredients that break the user's diet")
def analyze(request: AnalyzeRequest, store: Store = Depends(get_store)):
    user = require_user(store, request.userID)
    try:
        extracted = llm.extract_ingredients(request.recipe)
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "ingredient extraction") from exc

    problems: List[ProblemIngredient] = []
    for name in extracted:
        verdict, suggestions = check_ingredient(user, name)
        if not verdict.allowed:
            problems.append(ProblemIngredient(original=name, suggestions=suggestions))
    return AnalyzeResponse(violatesCount=len(problems), problematicIngredients=problems)


@veganize_router.post("/commit", response_model=CommitResponse, summary="Rewrite a recipe with chosen substitutes")
def commit(request: CommitRequest):
    subs = [s.model_dump() for s in request.chosenSubs]
    try:
        text = llm.rewrite_recipe_steps(subs, request.recipe.text)
    except llm.LLMError as exc:
        raise _llm_or_502(exc, "recipe rewrite") from exc
    return CommitResponse(adaptedRecipe=AdaptedRecipe(ingredients=request.chosenSubs, text=text))
