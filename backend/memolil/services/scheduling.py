"""
Review scheduling.

Interval policy (not SM-2):
  correct, interval 0  -> 2 days
  correct              -> double, capped at MAX_INTERVAL_DAYS
  incorrect            -> 1 day
  skipped              -> asked again in 1 day, nothing else changes

Session selection takes every due item, then tops up with random not-yet-due
items so a session is never short while the collection has material.
"""
from __future__ import annotations

import random
from collections.abc import Sequence

from memolil.models.knowledge import KnowledgeItem, QuizMode
from memolil.models.practice import ScheduleUpdate
from memolil.services.clock import DAY_MS

MAX_INTERVAL_DAYS = 21
SKIP_DELAY_MS = DAY_MS

_rng = random.Random()


def new_item_schedule(now: int) -> dict:
    """Scheduling fields for a freshly created item."""
    return {
        "introduced_at": now,
        "next_ask_at": now + DAY_MS,
        "interval_days": 1,
        "times_asked": 0,
        "times_correct": 0,
        "current_streak": 0,
        "last_answered_at": None,
        "last_answer_correct": None,
    }


def next_interval(interval_days: int, correct: bool) -> int:
    if not correct:
        return 1
    if interval_days == 0:
        return 2
    return min(interval_days * 2, MAX_INTERVAL_DAYS)


def compute_schedule(
    item: KnowledgeItem,
    correct: bool,
    skipped: bool,
    now: int,
) -> ScheduleUpdate:
    """Return the scheduling fields of `item` after one answer event."""
    if skipped:
        return ScheduleUpdate(
            next_ask_at=now + SKIP_DELAY_MS,
            interval_days=item.interval_days,
            current_streak=item.current_streak,
            times_asked=item.times_asked,
            times_correct=item.times_correct,
            last_answered_at=now,
            last_answer_correct=bool(item.last_answer_correct),
        )

    interval = next_interval(item.interval_days, correct)
    return ScheduleUpdate(
        next_ask_at=now + interval * DAY_MS,
        interval_days=interval,
        current_streak=item.current_streak + 1 if correct else 0,
        times_asked=item.times_asked + 1,
        times_correct=item.times_correct + 1 if correct else item.times_correct,
        last_answered_at=now,
        last_answer_correct=correct,
    )


def apply_schedule(item: KnowledgeItem, update: ScheduleUpdate) -> KnowledgeItem:
    return item.model_copy(update=update.model_dump())


def is_practicable(item: KnowledgeItem, mode: QuizMode | str) -> bool:
    mode = QuizMode(mode)
    if not item.question_variants:
        return False
    if mode is QuizMode.MIXED:
        return True
    return any(v.type == mode.value for v in item.question_variants)


def select_due_items(
    items: Sequence[KnowledgeItem],
    mode: QuizMode | str,
    max_count: int,
    now: int,
    rng: random.Random | None = None,
) -> list[KnowledgeItem]:
    """
    Pick up to `max_count` items for a practice session.

    Every due item is a candidate; when there are fewer than `max_count`,
    not-due items are sampled without replacement to fill the gap. The result
    is shuffled, so only its membership and length are meaningful.
    """
    rng = rng or _rng
    candidates = [item for item in items if is_practicable(item, mode)]

    due = [item for item in candidates if item.next_ask_at <= now]
    not_due = [item for item in candidates if item.next_ask_at > now]

    result = list(due)
    if len(result) < max_count and not_due:
        needed = min(max_count - len(result), len(not_due))
        result.extend(rng.sample(not_due, needed))

    rng.shuffle(result)
    return result[:max_count]
