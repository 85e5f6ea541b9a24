"""Tests for points and the daily practice streak."""

import pytest

from conftest import NOW, build_item
from memolil.services.clock import DAY_MS
from memolil.services.scoring import (
    DEFAULT_BASE_POINTS,
    advance_daily_streak,
    base_points,
    compute_points,
    streak_multiplier,
)


class TestBasePoints:
    @pytest.mark.parametrize(
        "difficulty, expected", [(1, 5), (2, 8), (3, 12), (4, 16), (5, 20)]
    )
    def test_table(self, difficulty, expected):
        assert base_points(difficulty) == expected

    @pytest.mark.parametrize("difficulty", [0, 6, -1, 99])
    def test_unknown_difficulty_uses_default(self, difficulty):
        assert base_points(difficulty) == DEFAULT_BASE_POINTS == 8


class TestStreakMultiplier:
    @pytest.mark.parametrize(
        "streak, expected",
        [(0, 0.0), (1, 0.25), (2, 0.25), (3, 0.5), (4, 0.5), (5, 1.0), (40, 1.0)],
    )
    def test_tiers(self, streak, expected):
        assert streak_multiplier(streak) == expected


class TestComputePoints:
    def test_incorrect_answer_scores_nothing(self):
        item = build_item(difficulty=5, current_streak=9, last_answered_at=NOW - 30 * DAY_MS)
        result = compute_points(item, correct=False, now=NOW)

        assert result.points == 0
        assert result.base_points == 0
        assert result.streak_bonus == 0
        assert result.time_gap_bonus == 0

    def test_base_only(self):
        item = build_item(difficulty=3, current_streak=0, last_answered_at=None)
        result = compute_points(item, correct=True, now=NOW)

        assert result.points == 12
        assert result.base_points == 12
        assert result.streak_bonus == 0
        assert result.time_gap_bonus == 0

    def test_all_bonuses(self):
        item = build_item(difficulty=5, current_streak=5, last_answered_at=NOW - 8 * DAY_MS)
        result = compute_points(item, correct=True, now=NOW)

        assert result.base_points == 20
        assert result.streak_bonus == 20
        assert result.time_gap_bonus == 4
        assert result.points == 44

    def test_bonuses_round_half_up(self):
        # 5 * 0.5 = 2.5 -> 3
        item = build_item(difficulty=1, current_streak=3, last_answered_at=None)
        result = compute_points(item, correct=True, now=NOW)

        assert result.streak_bonus == 3
        assert result.points == 8

    def test_bonus_rounds_down_below_half(self):
        # 5 * 0.25 = 1.25 -> 1; 5 * 0.2 = 1.0 -> 1
        item = build_item(difficulty=1, current_streak=1, last_answered_at=NOW - 7 * DAY_MS)
        result = compute_points(item, correct=True, now=NOW)

        assert result.streak_bonus == 1
        assert result.time_gap_bonus == 1
        assert result.points == 7

    def test_time_gap_rounds_up(self):
        # 8 * 0.2 = 1.6 -> 2
        item = build_item(difficulty=2, current_streak=0, last_answered_at=NOW - 10 * DAY_MS)
        assert compute_points(item, True, NOW).time_gap_bonus == 2

    def test_time_gap_boundary_is_inclusive(self):
        exactly = build_item(difficulty=3, last_answered_at=NOW - 7 * DAY_MS)
        just_under = build_item(difficulty=3, last_answered_at=NOW - 7 * DAY_MS + 1)

        assert compute_points(exactly, True, NOW).time_gap_bonus == 2
        assert compute_points(just_under, True, NOW).time_gap_bonus == 0

    def test_never_answered_item_gets_no_time_gap_bonus(self):
        item = build_item(difficulty=4, last_answered_at=None)
        assert compute_points(item, True, NOW).time_gap_bonus == 0

    def test_unknown_difficulty_scores_from_default_base(self):
        item = build_item(current_streak=0, last_answered_at=None).model_copy(
            update={"difficulty": 9}
        )
        assert compute_points(item, True, NOW).points == 8

    @pytest.mark.parametrize("difficulty", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("streak", [0, 1, 3, 5, 8])
    def test_points_are_sum_of_parts(self, difficulty, streak):
        item = build_item(
            difficulty=difficulty, current_streak=streak, last_answered_at=NOW - 9 * DAY_MS
        )
        result = compute_points(item, True, NOW)

        assert result.points == result.base_points + result.streak_bonus + result.time_gap_bonus
        assert result.points >= result.base_points > 0


class TestAdvanceDailyStreak:
    def test_first_practice_starts_streak(self):
        update = advance_daily_streak(None, 0, "2024-03-10")
        assert update.streak == 1
        assert update.today == "2024-03-10"

    def test_same_day_keeps_streak(self):
        update = advance_daily_streak("2024-03-10", 4, "2024-03-10")
        assert update.streak == 4

    def test_consecutive_day_extends_streak(self):
        update = advance_daily_streak("2024-03-09", 4, "2024-03-10")
        assert update.streak == 5
        assert update.today == "2024-03-10"

    def test_gap_resets_streak(self):
        update = advance_daily_streak("2024-03-07", 4, "2024-03-10")
        assert update.streak == 1

    def test_yesterday_across_month_boundary(self):
        assert advance_daily_streak("2024-02-29", 2, "2024-03-01").streak == 3

    def test_yesterday_across_year_boundary(self):
        assert advance_daily_streak("2023-12-31", 6, "2024-01-01").streak == 7
