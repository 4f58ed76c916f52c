# -*- coding: utf-8 -*-
"""Impact — find-or-create and award cycles against the impact collection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from ..store import Store
from .rules import MealAward, award_xp, register_meal


def _get_or_create(store: Store, user_id: str) -> Dict[str, Any]:
    impact, _ = store.impacts.find_one_or_create({"user_id": str(user_id)})
    return impact


def add_xp(store: Store, user_id: str, amount: int) -> Dict[str, Any]:
    with store.impacts.locked():
        impact = _get_or_create(store, user_id)
        award_xp(impact, amount)
        return store.impacts.save(impact)


def log_meal(store: Store, user_id: str, now: Optional[datetime] = None) -> Tuple[Dict[str, Any], MealAward]:
    now = now or datetime.now(timezone.utc)
    with store.impacts.locked():
        impact = _get_or_create(store, user_id)
        award = register_meal(impact, now)
        return store.impacts.save(impact), award
