# -*- coding: utf-8 -*-
"""Diet rules: forbidden tags per diet level, substitutions and text parsers."""

from .rules import (
    Compatibility,
    check_ingredient,
    diet_level_to_eating_style,
    eating_style_to_diet_level,
    is_allowed_for_user,
    map_ingredient_status,
    normalize_diet_level,
    parse_menu,
    parse_restrictions,
    substitutes_for,
    tags_for_ingredient,
)

__all__ = [
    'Compatibility',
    'check_ingredient',
    'diet_level_to_eating_style',
    'eating_style_to_diet_level',
    'is_allowed_for_user',
    'map_ingredient_status',
    'normalize_diet_level',
    'parse_menu',
    'parse_restrictions',
    'substitutes_for',
    'tags_for_ingredient',
]
