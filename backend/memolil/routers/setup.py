import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from memolil.db.sqlite import (
    export_collection,
    get_app_settings,
    get_db,
    get_namespace,
    import_collection,
    reset_collection,
    save_app_settings,
)
from memolil.models.setup import AppSettings, AppSettingsUpdate, CollectionExport

logger = logging.getLogger(__name__)
router = APIRouter()


# --- App settings ---


@router.get("/", response_model=AppSettings)
async def read_settings(
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    return await get_app_settings(db, namespace)


@router.put("/", response_model=AppSettings)
async def update_settings(
    body: AppSettingsUpdate,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    current = await get_app_settings(db, namespace)
    updated = current.model_copy(update=body.model_dump(exclude_none=True))
    return await save_app_settings(db, namespace, updated)


# --- Backup ---


@router.get("/export", response_model=CollectionExport)
async def export_data(
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    return await export_collection(db, namespace)


@router.post("/import")
async def import_data(
    body: CollectionExport,
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    try:
        await import_collection(db, namespace, body)
    except aiosqlite.IntegrityError as e:
        raise HTTPException(status_code=422, detail=f"Import rejected: {e}") from e
    logger.info(
        "Imported %d items and %d answers into namespace %s",
        len(body.knowledge_items), len(body.answer_logs), namespace,
    )
    return {"status": "ok", "items": len(body.knowledge_items)}


@router.post("/reset")
async def reset_data(
    namespace: str = Depends(get_namespace),
    db: aiosqlite.Connection = Depends(get_db),
):
    await reset_collection(db, namespace)
    logger.info("Reset namespace %s", namespace)
    return {"status": "ok"}
