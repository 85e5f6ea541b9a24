import aiosqlite
from fastapi import APIRouter, Depends

from memolil.db.sqlite import (
    get_collection_state,
    get_db,
    get_namespace,
    list_answer_logs,
    list_items,
)
from memolil.models.stats import StatsSummary
from memolil.services.clock import get_now
from memolil.services.stats import compute_stats

router = APIRouter()


@router.get("/", response_model=StatsSummary)
async def get_stats(
    namespace: str = Depends(get_namespace),
    now: int = Depends(get_now),
    db: aiosqlite.Connection = Depends(get_db),
):
    items, _ = await list_items(db, namespace)
    logs = await list_answer_logs(db, namespace)
    state = await get_collection_state(db, namespace)
    return compute_stats(items, logs, state, now)
