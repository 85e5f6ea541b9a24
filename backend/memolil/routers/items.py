import uuid

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from memolil.db.sqlite import (
    create_item,
    delete_item,
    get_db,
    get_item,
    get_namespace,
    list_items,
    set_question_variants,
    update_item,
)
from memolil.models.knowledge import (
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemList,
    KnowledgeItemUpdate,
)
from memolil.services.clock import get_now
from memolil.services.question_generator import generate_questions
from memolil.services.scheduling import new_item_schedule

router = APIRouter()


@router.post("/", response_model=KnowledgeItem, status_code=201)
async def create_knowledge_item(
    body: KnowledgeItemCreate,
    generate: bool = Query(default=False),
    namespace: str = Depends(get_namespace),
    now: int = Depends(get_now),
    db: aiosqlite.Connection = Depends(get_db),
):
    item = KnowledgeItem(
        id=str(uuid.uuid4()),
        created_at=now,
        **body.model_dump(),
        **new_item_schedule(now),
    )
    if generate:
        item = item.model_copy(update={"question_variants": await generate_questions(item)})
    return await create_item(db, namespace, item)


@router.get("/", response_model=KnowledgeItemList)
async def list_knowledge_items(
    q: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    items, total = await list_items(db, namespace, query=q, tag=tag, offset=offset, limit=limit)
    return KnowledgeItemList(items=items, total=total, offset=offset, limit=limit)


@router.get("/{item_id}", response_model=KnowledgeItem)
async def get_knowledge_item(
    item_id: str,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    item = await get_item(db, namespace, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Knowledge item not found")
    return item


@router.patch("/{item_id}", response_model=KnowledgeItem)
async def edit_knowledge_item(
    item_id: str,
    body: KnowledgeItemUpdate,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    item = await update_item(db, namespace, item_id, body)
    if not item:
        raise HTTPException(status_code=404, detail="Knowledge item not found")
    return item


@router.delete("/{item_id}", status_code=204)
async def remove_knowledge_item(
    item_id: str,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
) -> None:
    deleted = await delete_item(db, namespace, item_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Knowledge item not found")


@router.post("/{item_id}/questions", response_model=KnowledgeItem)
async def generate_item_questions(
    item_id: str,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    """Replace the item's question variants with freshly generated ones (LLM, else local)."""
    item = await get_item(db, namespace, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Knowledge item not found")
    variants = await generate_questions(item)
    return await set_question_variants(db, namespace, item_id, variants)
