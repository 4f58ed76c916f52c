# -*- coding: utf-8 -*-
"""Diet — compatibility decisions and small text parsers."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from .tables import COMMON_RESTRICTIONS, EATING_STYLES, FORBIDDEN_TAGS, INGREDIENTS

DEFAULT_DIET_LEVEL = "flexitarian"


def normalize_diet_level(value: Optional[str]) -> str:
    level = (value or "").strip().lower().replace("-", "_").replace(" ", "_")
    if level in FORBIDDEN_TAGS:
        return level
    mapped = EATING_STYLES.get((value or "").strip())
    return mapped or DEFAULT_DIET_LEVEL


def eating_style_to_diet_level(style: Optional[str]) -> str:
    """Mobile client eating-style label -> stored diet level."""
    return normalize_diet_level(style)


def diet_level_to_eating_style(level: Optional[str]) -> str:
    wanted = normalize_diet_level(level)
    for label, value in EATING_STYLES.items():
        if value == wanted:
            return label
    return "Flexitarian"


def _upper_all(values: Optional[Iterable[Any]]) -> List[str]:
    return [str(v).strip().upper() for v in (values or []) if str(v).strip()]


class Compatibility(NamedTuple):
    allowed: bool
    reasons: List[str]


def is_allowed_for_user(user: Mapping[str, Any], ingredient_tags: Iterable[str]) -> Compatibility:
    """Return ``(allowed, reasons)``.

    An ingredient is disallowed when any of its tags is forbidden by the
    user's diet level, listed in their custom forbidden tags, or an allergy."""
    level = normalize_diet_level(user.get("dietLevel"))
    forbidden = FORBIDDEN_TAGS.get(level, [])
    custom = _upper_all(user.get("extraForbiddenTags"))
    allergies = _upper_all(user.get("allergies"))

    reasons: List[str] = []
    for tag in _upper_all(ingredient_tags):
        if tag in forbidden:
            reasons.append(f"{tag} is forbidden for {level.upper()}")
        if tag in custom:
            reasons.append(f"{tag} is in your custom forbidden list")
        if tag in allergies:
            reasons.append(f"{tag} triggers an allergy")
    return Compatibility(not reasons, reasons)


def _lookup_key(ingredient: str) -> Optional[str]:
    name = re.sub(r"\s+", " ", ingredient.strip().upper())
    if name in INGREDIENTS:
        return name
    # Longest keyword contained in the name ("unsalted butter" -> BUTTER).
    best: Optional[str] = None
    for key in INGREDIENTS:
        if re.search(rf"\b{re.escape(key)}\b", name) and (best is None or len(key) > len(best)):
            best = key
    return best


def tags_for_ingredient(ingredient: str) -> List[str]:
    key = _lookup_key(ingredient)
    tags = [INGREDIENTS[key][0]] if key else []
    # The ingredient name itself doubles as a tag so custom lists like "peanuts" apply.
    tags.append(ingredient.strip().upper())
    return tags


def substitutes_for(ingredient: str, diet_level: Optional[str]) -> List[str]:
    key = _lookup_key(ingredient)
    if not key:
        return []
    tag, subs = INGREDIENTS[key]
    if tag not in FORBIDDEN_TAGS.get(normalize_diet_level(diet_level), []):
        return []
    return list(subs)


def check_ingredient(user: Mapping[str, Any], ingredient: str) -> Tuple[Compatibility, List[str]]:
    """Rule-based verdict for one ingredient name plus substitutes when disallowed."""
    verdict = is_allowed_for_user(user, tags_for_ingredient(ingredient))
    suggestions = [] if verdict.allowed else substitutes_for(ingredient, user.get("dietLevel"))
    return verdict, suggestions


def map_ingredient_status(label: Optional[str]) -> str:
    val = (label or "").lower()
    if "not" in val:
        return "not_allowed"
    if "ambig" in val:
        return "ambiguous"
    return "allowed"


def parse_menu(menu_text: Optional[str]) -> List[Dict[str, Any]]:
    """``Dish: ing1, ing2`` per line -> ``[{"name", "ingredients"}]``; malformed lines are skipped."""
    if not menu_text or not isinstance(menu_text, str):
        return []
    dishes: List[Dict[str, Any]] = []
    for line in menu_text.splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        name, rest = line.split(":", 1)
        name = name.strip()
        if not name:
            continue
        ingredients = [ing.strip() for ing in rest.split(",") if ing.strip()]
        dishes.append({"name": name, "ingredients": ingredients})
    return dishes


def parse_restrictions(text: Optional[str]) -> List[str]:
    lower = (text or "").lower()
    return [r for r in COMMON_RESTRICTIONS if r in lower]
