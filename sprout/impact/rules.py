# -*- coding: utf-8 -*-
"""Impact — XP, levels, forest stages and meal streaks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..store.domain import ForestStage

MEAL_XP = 10
STREAK_BONUS_XP = 20
COOK_WITH_THIS_XP = 5
XP_PER_LEVEL = 100

# (exclusive upper bound, stage), ascending.
_STAGE_THRESHOLDS: List[Tuple[int, ForestStage]] = [
    (50, ForestStage.SEED),
    (200, ForestStage.SPROUT),
    (500, ForestStage.SAPLING),
    (1500, ForestStage.FOREST),
]

MISSION_XP: Dict[str, int] = {"1": 10, "2": 5, "3": 15}
DEFAULT_MISSION_XP = 5

MISSIONS: List[Dict[str, Any]] = [
    {"id": "log_meal", "title": "Log one vegan meal today", "xpReward": 20, "coinReward": 5, "isCompleted": False},
    {"id": "scan_ingredients", "title": "Scan ingredients of a product", "xpReward": 10, "coinReward": 3, "isCompleted": False},
]


def forest_stage_for(xp: int) -> ForestStage:
    for upper, stage in _STAGE_THRESHOLDS:
        if xp < upper:
            return stage
    return ForestStage.ANCIENT_FOREST


def level_for(xp: int) -> int:
    return max(int(xp or 0), 0) // XP_PER_LEVEL + 1


def xp_to_next_level(xp: int) -> int:
    return XP_PER_LEVEL - max(int(xp or 0), 0) % XP_PER_LEVEL


def mission_xp(mission_id: str) -> int:
    return MISSION_XP.get(str(mission_id), DEFAULT_MISSION_XP)


def _parse_day(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc).date() if parsed.tzinfo else parsed.date()


def award_xp(impact: Dict[str, Any], amount: int) -> Dict[str, Any]:
    """Add ``amount`` XP (never negative) and recompute the forest stage in place."""
    impact["xp"] = int(impact.get("xp") or 0) + max(int(amount), 0)
    impact["forest_stage"] = forest_stage_for(impact["xp"]).value
    return impact


@dataclass(frozen=True)
class MealAward:
    meal_xp: int
    streak_bonus: int

    @property
    def total(self) -> int:
        return self.meal_xp + self.streak_bonus


def register_meal(impact: Dict[str, Any], now: datetime) -> MealAward:
    """Log one meal on ``impact`` in place.

    Streaks count UTC calendar days: a meal the day after the last activity
    extends the streak, a later one restarts it at 1, the same day leaves it.
    """
    today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()
    last = _parse_day(impact.get("last_activity_date"))
    streak = int(impact.get("streak_days") or 0)

    bonus = 0
    if last is None:
        streak = 1
        bonus = STREAK_BONUS_XP
    else:
        diff = (today - last).days
        if diff == 1:
            streak += 1
            bonus = STREAK_BONUS_XP
        elif diff > 1:
            streak = 1
            bonus = STREAK_BONUS_XP

    award = MealAward(meal_xp=MEAL_XP, streak_bonus=bonus)
    impact["streak_days"] = streak
    impact["total_meals_logged"] = int(impact.get("total_meals_logged") or 0) + 1
    impact["last_activity_date"] = now.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    award_xp(impact, award.total)
    return award
