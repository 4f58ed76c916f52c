# -*- coding: utf-8 -*-
"""Diet — static lookup tables (forbidden tags, ingredient tags, substitutions)."""

from __future__ import annotations

from typing import Dict, List, Tuple

_ANIMAL_FLESH = ["MEAT", "POULTRY", "FISH", "SHELLFISH", "GELATIN"]

FORBIDDEN_TAGS: Dict[str, List[str]] = {
    "vegan": _ANIMAL_FLESH + ["DAIRY", "EGG", "HONEY"],
    "vegetarian": list(_ANIMAL_FLESH),
    "lacto_ovo": list(_ANIMAL_FLESH),
    "lacto": _ANIMAL_FLESH + ["EGG"],
    "ovo": _ANIMAL_FLESH + ["DAIRY"],
    "pescatarian": ["MEAT", "POULTRY", "GELATIN"],
    "flexitarian": [],
}

# ingredient keyword -> (tag, plant-based substitutes)
INGREDIENTS: Dict[str, Tuple[str, List[str]]] = {
    "MILK": ("DAIRY", ["oat milk", "soy milk", "almond milk"]),
    "BUTTER": ("DAIRY", ["vegan butter", "olive oil", "coconut oil"]),
    "CHEESE": ("DAIRY", ["nutritional yeast", "cashew cheese"]),
    "PARMESAN": ("DAIRY", ["nutritional yeast", "vegan parmesan"]),
    "CREAM": ("DAIRY", ["coconut cream", "cashew cream"]),
    "YOGURT": ("DAIRY", ["soy yogurt", "coconut yogurt"]),
    "GHEE": ("DAIRY", ["coconut oil", "vegan butter"]),
    "EGG": ("EGG", ["flax egg", "chia egg", "silken tofu"]),
    "EGGS": ("EGG", ["flax egg", "chia egg", "silken tofu"]),
    "MAYONNAISE": ("EGG", ["vegan mayonnaise"]),
    "HONEY": ("HONEY", ["maple syrup", "agave syrup"]),
    "BEEF": ("MEAT", ["seitan", "lentils", "mushrooms"]),
    "PORK": ("MEAT", ["jackfruit", "smoked tofu"]),
    "BACON": ("MEAT", ["smoked tempeh", "coconut bacon"]),
    "HAM": ("MEAT", ["smoked tofu"]),
    "LAMB": ("MEAT", ["seitan", "chickpeas"]),
    "SAUSAGE": ("MEAT", ["plant-based sausage"]),
    "CHICKEN": ("POULTRY", ["tofu", "chickpeas", "seitan"]),
    "TURKEY": ("POULTRY", ["tempeh", "seitan"]),
    "CHICKEN STOCK": ("POULTRY", ["vegetable stock"]),
    "BEEF STOCK": ("MEAT", ["mushroom stock", "vegetable stock"]),
    "FISH": ("FISH", ["tofu", "hearts of palm"]),
    "SALMON": ("FISH", ["marinated carrot", "tofu"]),
    "TUNA": ("FISH", ["mashed chickpeas"]),
    "ANCHOVY": ("FISH", ["capers", "miso paste"]),
    "FISH SAUCE": ("FISH", ["soy sauce", "seaweed broth"]),
    "SHRIMP": ("SHELLFISH", ["king oyster mushrooms", "konjac shrimp"]),
    "PRAWN": ("SHELLFISH", ["king oyster mushrooms"]),
    "CRAB": ("SHELLFISH", ["hearts of palm"]),
    "GELATIN": ("GELATIN", ["agar agar"]),
}

COMMON_RESTRICTIONS: List[str] = [
    "gluten", "dairy", "nuts", "peanuts", "soy", "eggs",
    "fish", "shellfish", "sesame", "sulfites",
]

# Mobile client label -> stored diet level.
EATING_STYLES: Dict[str, str] = {
    "Vegan": "vegan",
    "Vegetarian": "vegetarian",
    "Ovo-vegetarian": "ovo",
    "Lacto-vegetarian": "lacto",
    "Lacto-ovo vegetarian": "lacto_ovo",
    "Pescatarian": "pescatarian",
    "Flexitarian": "flexitarian",
}
