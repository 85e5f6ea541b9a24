"""
Points and the daily practice streak.

Points for a correct answer = base (by difficulty)
                            + streak bonus (by the item's streak before answering)
                            + time-gap bonus (item not answered for a week)
Each bonus is rounded half-up on its own before summing.
"""
from __future__ import annotations

import math
from datetime import date, timedelta

from memolil.models.knowledge import KnowledgeItem
from memolil.models.practice import DailyStreakUpdate, ScoreResult
from memolil.services.clock import DAY_MS

BASE_POINTS = {1: 5, 2: 8, 3: 12, 4: 16, 5: 20}
DEFAULT_BASE_POINTS = 8

# (minimum streak, bonus fraction), checked in order
STREAK_BONUS_TIERS = ((5, 1.0), (3, 0.5), (1, 0.25))

TIME_GAP_MS = 7 * DAY_MS
TIME_GAP_BONUS = 0.2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def base_points(difficulty: int) -> int:
    return BASE_POINTS.get(difficulty, DEFAULT_BASE_POINTS)


def streak_multiplier(streak: int) -> float:
    for minimum, fraction in STREAK_BONUS_TIERS:
        if streak >= minimum:
            return fraction
    return 0.0


def compute_points(item: KnowledgeItem, correct: bool, now: int) -> ScoreResult:
    if not correct:
        return ScoreResult()

    base = base_points(item.difficulty)
    streak_bonus = _round_half_up(base * streak_multiplier(item.current_streak))

    time_gap_bonus = 0
    if item.last_answered_at is not None and now - item.last_answered_at >= TIME_GAP_MS:
        time_gap_bonus = _round_half_up(base * TIME_GAP_BONUS)

    return ScoreResult(
        points=base + streak_bonus + time_gap_bonus,
        base_points=base,
        streak_bonus=streak_bonus,
        time_gap_bonus=time_gap_bonus,
    )


def advance_daily_streak(
    last_practice_date: str | None,
    current_streak: int,
    today: str,
) -> DailyStreakUpdate:
    """Count consecutive calendar days with at least one answer."""
    if not last_practice_date:
        return DailyStreakUpdate(streak=1, today=today)

    if last_practice_date == today:
        return DailyStreakUpdate(streak=current_streak, today=today)

    yesterday = (date.fromisoformat(today) - timedelta(days=1)).isoformat()
    if last_practice_date == yesterday:
        return DailyStreakUpdate(streak=current_streak + 1, today=today)

    return DailyStreakUpdate(streak=1, today=today)
