from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from memolil.models.knowledge import KnowledgeItem
from memolil.models.practice import AnswerLog, CollectionState
from memolil.models.stats import (
    DayAccuracy,
    DayPoints,
    IntervalBucket,
    ItemAccuracy,
    ItemStreak,
    StatsSummary,
    TagAccuracy,
)
from memolil.services.clock import DAY_MS, local_date

TOP_N = 5
HARDEST_MIN_ASKED = 3
LEVEL_UP_MIN_STREAK = 3
LEVEL_UP_MIN_INTERVAL = 7

# (label, upper bound in days, inclusive); None = unbounded
INTERVAL_BUCKETS = (
    ("0-3 days", 3),
    ("4-7 days", 7),
    ("8-14 days", 14),
    ("15-21 days", 21),
    ("21+ days", None),
)


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _streak(item: KnowledgeItem) -> ItemStreak:
    return ItemStreak(
        id=item.id,
        title=item.title,
        current_streak=item.current_streak,
        interval_days=item.interval_days,
    )


def _interval_distribution(items: Sequence[KnowledgeItem]) -> list[IntervalBucket]:
    counts = {label: 0 for label, _ in INTERVAL_BUCKETS}
    for item in items:
        for label, upper in INTERVAL_BUCKETS:
            if upper is None or item.interval_days <= upper:
                counts[label] += 1
                break
    return [IntervalBucket(range=label, count=count) for label, count in counts.items()]


def _tag_accuracy(
    items: Sequence[KnowledgeItem], logs: Sequence[AnswerLog]
) -> list[TagAccuracy]:
    logs_by_item: dict[str, list[AnswerLog]] = defaultdict(list)
    for log in logs:
        logs_by_item[log.knowledge_item_id].append(log)

    totals: dict[str, list[int]] = defaultdict(lambda: [0, 0])  # tag -> [correct, total]
    for item in items:
        item_logs = logs_by_item.get(item.id, [])
        correct = sum(1 for log in item_logs if log.is_correct)
        for tag in item.tags:
            totals[tag][0] += correct
            totals[tag][1] += len(item_logs)

    ranked = [
        TagAccuracy(tag=tag, accuracy=_percent(correct, total), total=total)
        for tag, (correct, total) in totals.items()
        if total > 0
    ]
    ranked.sort(key=lambda t: t.accuracy)
    return ranked[:TOP_N]


def compute_stats(
    items: Sequence[KnowledgeItem],
    logs: Sequence[AnswerLog],
    state: CollectionState,
    now: int,
) -> StatsSummary:
    """Aggregate practice history for the stats screen."""
    month_ago = now - 30 * DAY_MS
    week_ago = now - 7 * DAY_MS
    recent = [log for log in logs if log.answered_at >= month_ago]

    top_items = sorted(
        (item for item in items if item.current_streak > 0),
        key=lambda item: item.current_streak,
        reverse=True,
    )[:TOP_N]

    hardest = sorted(
        (
            ItemAccuracy(
                id=item.id,
                title=item.title,
                accuracy=_percent(item.times_correct, item.times_asked),
            )
            for item in items
            if item.times_asked >= HARDEST_MIN_ASKED
        ),
        key=lambda entry: entry.accuracy,
    )[:TOP_N]

    ready = [
        _streak(item)
        for item in items
        if item.current_streak >= LEVEL_UP_MIN_STREAK
        and item.interval_days >= LEVEL_UP_MIN_INTERVAL
    ][:TOP_N]

    points_by_day: dict[str, int] = defaultdict(int)
    answers_by_day: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for log in recent:
        day = local_date(log.answered_at)
        points_by_day[day] += log.points_awarded
        answers_by_day[day][1] += 1
        if log.is_correct:
            answers_by_day[day][0] += 1

    return StatsSummary(
        total_points=state.total_points,
        daily_practice_streak=state.daily_practice_streak,
        total_items=len(items),
        total_attempts=len(logs),
        overall_retention=_percent(sum(1 for log in logs if log.is_correct), len(logs)),
        last_30_days_retention=_percent(
            sum(1 for log in recent if log.is_correct), len(recent)
        ),
        points_this_week=sum(log.points_awarded for log in logs if log.answered_at >= week_ago),
        points_this_month=sum(log.points_awarded for log in recent),
        top_items=[_streak(item) for item in top_items],
        most_forgotten_tags=_tag_accuracy(items, logs),
        hardest_items=hardest,
        ready_to_level_up=ready,
        points_per_day=[
            DayPoints(date=day, points=points) for day, points in sorted(points_by_day.items())
        ],
        accuracy_per_day=[
            DayAccuracy(date=day, accuracy=_percent(correct, total))
            for day, (correct, total) in sorted(answers_by_day.items())
        ],
        interval_distribution=_interval_distribution(items),
    )
