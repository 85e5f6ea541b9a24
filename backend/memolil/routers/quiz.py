"""
Quiz router.

Endpoints:
  POST /quiz/session    pick due (plus filler) items and one variant each
  POST /quiz/answer     grade an answer or a skip, score it, reschedule the item
  GET  /quiz/due        how many items are practicable / due right now
  GET  /quiz/logs       answer history, optionally for one item
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from memolil.db.sqlite import (
    apply_practice_outcome,
    get_app_settings,
    get_collection_state,
    get_db,
    get_item,
    get_namespace,
    list_answer_logs,
    list_items,
)
from memolil.models.knowledge import QuizMode
from memolil.models.practice import (
    AnswerLogList,
    AnswerRequest,
    AnswerResult,
    DueSummary,
    Session,
    SessionQuestion,
    SessionRequest,
)
from memolil.services.answer_checker import check_answer
from memolil.services.clock import get_now, local_date
from memolil.services.practice import record_answer
from memolil.services.scheduling import is_practicable, select_due_items
from memolil.services.variant_selector import select_variant_index

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/session", response_model=Session)
async def start_session(
    body: SessionRequest,
    namespace: str = Depends(get_namespace),
    now: int = Depends(get_now),
    db: aiosqlite.Connection = Depends(get_db),
) -> Session:
    """An empty question list means there is nothing to practice in this mode."""
    app_settings = await get_app_settings(db, namespace)
    mode = body.mode or app_settings.default_quiz_mode
    max_count = body.max_count or app_settings.questions_per_session

    items, _ = await list_items(db, namespace)
    selected = select_due_items(items, mode, max_count, now)

    questions = []
    for item in selected:
        index = select_variant_index(item, mode)
        questions.append(
            SessionQuestion(item=item, variant_index=index, variant=item.question_variants[index])
        )
    return Session(mode=mode, questions=questions)


@router.post("/answer", response_model=AnswerResult)
async def submit_answer(
    body: AnswerRequest,
    namespace: str = Depends(get_namespace),
    now: int = Depends(get_now),
    db: aiosqlite.Connection = Depends(get_db),
) -> AnswerResult:
    item = await get_item(db, namespace, body.item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Knowledge item not found")

    variant = next((v for v in item.question_variants if v.id == body.variant_id), None)
    if variant is None:
        raise HTTPException(status_code=404, detail="Question variant not found")

    correct = False if body.skipped else check_answer(variant, body.user_answer)
    state = await get_collection_state(db, namespace)

    outcome = record_answer(
        item,
        state,
        variant_id=variant.id,
        mode=variant.type,
        user_answer=body.user_answer,
        correct=correct,
        skipped=body.skipped,
        now=now,
        today=local_date(now),
    )
    await apply_practice_outcome(db, namespace, item.id, outcome)
    logger.info(
        "Answer on item %s: correct=%s skipped=%s points=%d next in %d days",
        item.id, correct, body.skipped, outcome.score.points, outcome.schedule.interval_days,
    )

    return AnswerResult(
        correct=correct,
        score=outcome.score,
        schedule=outcome.schedule,
        daily_practice_streak=outcome.state.daily_practice_streak,
        total_points=outcome.state.total_points,
        log_id=outcome.log.id,
    )


@router.get("/due", response_model=DueSummary)
async def due_summary(
    mode: QuizMode = Query(default=QuizMode.MIXED),
    namespace: str = Depends(get_namespace),
    now: int = Depends(get_now),
    db: aiosqlite.Connection = Depends(get_db),
) -> DueSummary:
    items, total = await list_items(db, namespace)
    practicable = [item for item in items if is_practicable(item, mode)]
    return DueSummary(
        total_items=total,
        practicable=len(practicable),
        due_now=sum(1 for item in practicable if item.next_ask_at <= now),
    )


@router.get("/logs", response_model=AnswerLogList)
async def answer_logs(
    item_id: str | None = Query(default=None),
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
) -> AnswerLogList:
    logs = await list_answer_logs(db, namespace, item_id=item_id)
    return AnswerLogList(items=logs, total=len(logs))
