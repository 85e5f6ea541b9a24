"""
One answer event, end to end.

record_answer() combines scoring, scheduling and the daily streak into a
PracticeOutcome. It reads nothing but its arguments; the quiz router writes
the outcome back to the store in one transaction.
"""
from __future__ import annotations

import uuid

from memolil.models.knowledge import KnowledgeItem, QuestionType
from memolil.models.practice import AnswerLog, CollectionState, PracticeOutcome
from memolil.services.scheduling import compute_schedule
from memolil.services.scoring import advance_daily_streak, compute_points


def record_answer(
    item: KnowledgeItem,
    state: CollectionState,
    variant_id: str,
    mode: QuestionType | str,
    user_answer: str,
    correct: bool,
    skipped: bool,
    now: int,
    today: str,
) -> PracticeOutcome:
    # Points use the item's state from before this answer
    score = compute_points(item, correct and not skipped, now)
    schedule = compute_schedule(item, correct, skipped, now)
    streak = advance_daily_streak(
        state.last_practice_date, state.daily_practice_streak, today
    )

    log = AnswerLog(
        id=str(uuid.uuid4()),
        knowledge_item_id=item.id,
        question_variant_id=variant_id,
        answered_at=now,
        mode=QuestionType(mode),
        user_answer=user_answer,
        is_correct=correct and not skipped,
        points_awarded=score.points,
        skipped=skipped,
    )

    return PracticeOutcome(
        log=log,
        score=score,
        schedule=schedule,
        state=CollectionState(
            total_points=state.total_points + score.points,
            daily_practice_streak=streak.streak,
            last_practice_date=streak.today,
        ),
    )
