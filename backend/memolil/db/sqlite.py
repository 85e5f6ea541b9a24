import json
from pathlib import Path
from typing import AsyncIterator

import aiosqlite
from fastapi import Header

from memolil.config import settings
from memolil.models.knowledge import (
    KnowledgeItem,
    KnowledgeItemUpdate,
    QuestionVariant,
    question_variants_adapter,
)
from memolil.models.practice import AnswerLog, CollectionState, PracticeOutcome
from memolil.models.setup import AppSettings, CollectionExport

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS knowledge_items (
    id                  TEXT NOT NULL,
    namespace           TEXT NOT NULL,
    title               TEXT NOT NULL,
    content             TEXT NOT NULL,
    tags                TEXT NOT NULL DEFAULT '[]',
    difficulty          INTEGER NOT NULL DEFAULT 2,
    source              TEXT NOT NULL DEFAULT 'typed',
    created_at          INTEGER NOT NULL,
    question_variants   TEXT NOT NULL DEFAULT '[]',
    introduced_at       INTEGER NOT NULL,
    next_ask_at         INTEGER NOT NULL,
    interval_days       INTEGER NOT NULL DEFAULT 1,
    times_asked         INTEGER NOT NULL DEFAULT 0,
    times_correct       INTEGER NOT NULL DEFAULT 0,
    current_streak      INTEGER NOT NULL DEFAULT 0,
    last_answered_at    INTEGER,
    last_answer_correct INTEGER,
    PRIMARY KEY (namespace, id)
);
CREATE INDEX IF NOT EXISTS idx_items_namespace ON knowledge_items(namespace, created_at);
CREATE INDEX IF NOT EXISTS idx_items_due ON knowledge_items(namespace, next_ask_at);

CREATE TABLE IF NOT EXISTS answer_logs (
    id                  TEXT NOT NULL,
    namespace           TEXT NOT NULL,
    knowledge_item_id   TEXT NOT NULL,
    question_variant_id TEXT NOT NULL,
    answered_at         INTEGER NOT NULL,
    mode                TEXT NOT NULL,
    user_answer         TEXT NOT NULL DEFAULT '',
    is_correct          INTEGER NOT NULL,
    points_awarded      INTEGER NOT NULL DEFAULT 0,
    skipped             INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (namespace, id),
    FOREIGN KEY (namespace, knowledge_item_id)
        REFERENCES knowledge_items(namespace, id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_logs_namespace ON answer_logs(namespace, answered_at);
CREATE INDEX IF NOT EXISTS idx_logs_item ON answer_logs(namespace, knowledge_item_id);

CREATE TABLE IF NOT EXISTS collection_state (
    namespace             TEXT PRIMARY KEY,
    total_points          INTEGER NOT NULL DEFAULT 0,
    daily_practice_streak INTEGER NOT NULL DEFAULT 0,
    last_practice_date    TEXT
);

CREATE TABLE IF NOT EXISTS settings (
    namespace  TEXT NOT NULL,
    key        TEXT NOT NULL,
    value      TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (namespace, key)
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def get_namespace(x_namespace: str | None = Header(default=None)) -> str:
    """Collection the request operates on: personal by default, or a shared group id."""
    return x_namespace or settings.default_namespace


# --- Knowledge items ---

_ITEM_COLUMNS = (
    "id", "namespace", "title", "content", "tags", "difficulty", "source",
    "created_at", "question_variants", "introduced_at", "next_ask_at",
    "interval_days", "times_asked", "times_correct", "current_streak",
    "last_answered_at", "last_answer_correct",
)


def _row_to_item(row: aiosqlite.Row) -> KnowledgeItem:
    d = dict(row)
    d.pop("namespace")
    d["tags"] = json.loads(d["tags"])
    d["question_variants"] = json.loads(d["question_variants"])
    if d["last_answer_correct"] is not None:
        d["last_answer_correct"] = bool(d["last_answer_correct"])
    return KnowledgeItem(**d)


def _variants_json(variants: list[QuestionVariant]) -> str:
    return question_variants_adapter.dump_json(variants).decode()


def _item_values(namespace: str, item: KnowledgeItem) -> tuple:
    return (
        item.id,
        namespace,
        item.title,
        item.content,
        json.dumps(item.tags),
        item.difficulty,
        item.source,
        item.created_at,
        _variants_json(item.question_variants),
        item.introduced_at,
        item.next_ask_at,
        item.interval_days,
        item.times_asked,
        item.times_correct,
        item.current_streak,
        item.last_answered_at,
        item.last_answer_correct,
    )


async def _insert_item(db: aiosqlite.Connection, namespace: str, item: KnowledgeItem) -> None:
    placeholders = ", ".join("?" for _ in _ITEM_COLUMNS)
    await db.execute(
        f"INSERT INTO knowledge_items ({', '.join(_ITEM_COLUMNS)}) VALUES ({placeholders})",  # noqa: S608
        _item_values(namespace, item),
    )


async def create_item(
    db: aiosqlite.Connection, namespace: str, item: KnowledgeItem
) -> KnowledgeItem:
    await _insert_item(db, namespace, item)
    await db.commit()
    return await get_item(db, namespace, item.id)  # type: ignore[return-value]


async def insert_items(
    db: aiosqlite.Connection, namespace: str, items: list[KnowledgeItem]
) -> int:
    for item in items:
        await _insert_item(db, namespace, item)
    await db.commit()
    return len(items)


async def get_item(
    db: aiosqlite.Connection, namespace: str, item_id: str
) -> KnowledgeItem | None:
    cursor = await db.execute(
        "SELECT * FROM knowledge_items WHERE namespace = ? AND id = ?",
        (namespace, item_id),
    )
    row = await cursor.fetchone()
    return _row_to_item(row) if row else None


async def list_items(
    db: aiosqlite.Connection,
    namespace: str,
    query: str | None = None,
    tag: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[KnowledgeItem], int]:
    """
    Items of a namespace, newest first.
    `query` matches title, content or any tag (case-insensitive substring).
    """
    cursor = await db.execute(
        "SELECT * FROM knowledge_items WHERE namespace = ? ORDER BY created_at DESC",
        (namespace,),
    )
    items = [_row_to_item(r) for r in await cursor.fetchall()]

    if query:
        q = query.lower()
        items = [
            i for i in items
            if q in i.title.lower()
            or q in i.content.lower()
            or any(q in t.lower() for t in i.tags)
        ]
    if tag:
        items = [i for i in items if tag in i.tags]

    total = len(items)
    end = None if limit is None else offset + limit
    return items[offset:end], total


async def count_items(db: aiosqlite.Connection, namespace: str) -> int:
    cursor = await db.execute(
        "SELECT COUNT(*) FROM knowledge_items WHERE namespace = ?", (namespace,)
    )
    row = await cursor.fetchone()
    return row[0] if row else 0


async def update_item(
    db: aiosqlite.Connection,
    namespace: str,
    item_id: str,
    updates: KnowledgeItemUpdate,
) -> KnowledgeItem | None:
    fields = updates.model_dump(exclude_none=True)
    if not fields:
        return await get_item(db, namespace, item_id)

    if "tags" in fields:
        fields["tags"] = json.dumps(fields["tags"])
    set_clause = ", ".join(f"{k} = ?" for k in fields)
    values = list(fields.values()) + [namespace, item_id]

    await db.execute(
        f"UPDATE knowledge_items SET {set_clause} WHERE namespace = ? AND id = ?",  # noqa: S608
        values,
    )
    await db.commit()
    return await get_item(db, namespace, item_id)


async def set_question_variants(
    db: aiosqlite.Connection,
    namespace: str,
    item_id: str,
    variants: list[QuestionVariant],
) -> KnowledgeItem | None:
    await db.execute(
        "UPDATE knowledge_items SET question_variants = ? WHERE namespace = ? AND id = ?",
        (_variants_json(variants), namespace, item_id),
    )
    await db.commit()
    return await get_item(db, namespace, item_id)


async def delete_item(db: aiosqlite.Connection, namespace: str, item_id: str) -> bool:
    """Delete an item; its answer logs go with it (ON DELETE CASCADE)."""
    cursor = await db.execute(
        "DELETE FROM knowledge_items WHERE namespace = ? AND id = ?",
        (namespace, item_id),
    )
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Answer logs & collection state ---


def _row_to_log(row: aiosqlite.Row) -> AnswerLog:
    d = dict(row)
    d.pop("namespace")
    d["is_correct"] = bool(d["is_correct"])
    d["skipped"] = bool(d["skipped"])
    return AnswerLog(**d)


async def _insert_log(db: aiosqlite.Connection, namespace: str, log: AnswerLog) -> None:
    await db.execute(
        """INSERT INTO answer_logs
           (id, namespace, knowledge_item_id, question_variant_id, answered_at,
            mode, user_answer, is_correct, points_awarded, skipped)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            log.id,
            namespace,
            log.knowledge_item_id,
            log.question_variant_id,
            log.answered_at,
            log.mode.value,
            log.user_answer,
            log.is_correct,
            log.points_awarded,
            log.skipped,
        ),
    )


async def list_answer_logs(
    db: aiosqlite.Connection,
    namespace: str,
    item_id: str | None = None,
    since: int | None = None,
) -> list[AnswerLog]:
    sql = "SELECT * FROM answer_logs WHERE namespace = ?"
    params: list = [namespace]
    if item_id:
        sql += " AND knowledge_item_id = ?"
        params.append(item_id)
    if since is not None:
        sql += " AND answered_at >= ?"
        params.append(since)
    sql += " ORDER BY answered_at ASC"
    cursor = await db.execute(sql, params)
    return [_row_to_log(r) for r in await cursor.fetchall()]


async def get_collection_state(db: aiosqlite.Connection, namespace: str) -> CollectionState:
    cursor = await db.execute(
        "SELECT total_points, daily_practice_streak, last_practice_date "
        "FROM collection_state WHERE namespace = ?",
        (namespace,),
    )
    row = await cursor.fetchone()
    if row is None:
        return CollectionState()
    return CollectionState(**dict(row))


async def _put_collection_state(
    db: aiosqlite.Connection, namespace: str, state: CollectionState
) -> None:
    await db.execute(
        "INSERT INTO collection_state(namespace, total_points, daily_practice_streak, last_practice_date) "
        "VALUES (?, ?, ?, ?) "
        "ON CONFLICT(namespace) DO UPDATE SET total_points = excluded.total_points, "
        "daily_practice_streak = excluded.daily_practice_streak, "
        "last_practice_date = excluded.last_practice_date",
        (namespace, state.total_points, state.daily_practice_streak, state.last_practice_date),
    )


async def apply_practice_outcome(
    db: aiosqlite.Connection,
    namespace: str,
    item_id: str,
    outcome: PracticeOutcome,
) -> None:
    """Write schedule, answer log and collection state in a single commit."""
    schedule = outcome.schedule.model_dump()
    set_clause = ", ".join(f"{k} = ?" for k in schedule)
    await db.execute(
        f"UPDATE knowledge_items SET {set_clause} WHERE namespace = ? AND id = ?",  # noqa: S608
        list(schedule.values()) + [namespace, item_id],
    )
    await _insert_log(db, namespace, outcome.log)
    await _put_collection_state(db, namespace, outcome.state)
    await db.commit()


# --- Settings key-value store ---


async def get_setting(db: aiosqlite.Connection, namespace: str, key: str) -> str | None:
    cursor = await db.execute(
        "SELECT value FROM settings WHERE namespace = ? AND key = ?", (namespace, key)
    )
    row = await cursor.fetchone()
    return row[0] if row else None


async def _put_setting(db: aiosqlite.Connection, namespace: str, key: str, value: str) -> None:
    await db.execute(
        "INSERT INTO settings(namespace, key, value) VALUES (?, ?, ?) "
        "ON CONFLICT(namespace, key) DO UPDATE SET value = excluded.value",
        (namespace, key, value),
    )


async def set_setting(db: aiosqlite.Connection, namespace: str, key: str, value: str) -> None:
    await _put_setting(db, namespace, key, value)
    await db.commit()


async def get_app_settings(db: aiosqlite.Connection, namespace: str) -> AppSettings:
    cursor = await db.execute(
        "SELECT key, value FROM settings WHERE namespace = ?", (namespace,)
    )
    stored = {row[0]: json.loads(row[1]) for row in await cursor.fetchall()}
    return AppSettings(**{k: v for k, v in stored.items() if k in AppSettings.model_fields})


async def _put_app_settings(
    db: aiosqlite.Connection, namespace: str, app_settings: AppSettings
) -> None:
    for key, value in app_settings.model_dump(mode="json").items():
        await _put_setting(db, namespace, key, json.dumps(value))


async def save_app_settings(
    db: aiosqlite.Connection, namespace: str, app_settings: AppSettings
) -> AppSettings:
    await _put_app_settings(db, namespace, app_settings)
    await db.commit()
    return app_settings


# --- Whole-collection export / import / reset ---


async def export_collection(db: aiosqlite.Connection, namespace: str) -> CollectionExport:
    items, _ = await list_items(db, namespace)
    return CollectionExport(
        namespace=namespace,
        knowledge_items=items,
        answer_logs=await list_answer_logs(db, namespace),
        state=await get_collection_state(db, namespace),
        settings=await get_app_settings(db, namespace),
    )


_COLLECTION_TABLES = ("answer_logs", "knowledge_items", "collection_state", "settings")


async def _delete_collection(db: aiosqlite.Connection, namespace: str) -> None:
    for table in _COLLECTION_TABLES:
        await db.execute(f"DELETE FROM {table} WHERE namespace = ?", (namespace,))  # noqa: S608


async def reset_collection(db: aiosqlite.Connection, namespace: str) -> None:
    await _delete_collection(db, namespace)
    await db.commit()


async def import_collection(
    db: aiosqlite.Connection, namespace: str, data: CollectionExport
) -> None:
    """
    Replace the namespace's collection with `data` in one transaction.
    On any error the previous collection is left untouched and the error re-raised.
    """
    try:
        await _delete_collection(db, namespace)
        item_ids = set()
        for item in data.knowledge_items:
            await _insert_item(db, namespace, item)
            item_ids.add(item.id)
        # Logs of items missing from the export would violate the foreign key
        for log in data.answer_logs:
            if log.knowledge_item_id in item_ids:
                await _insert_log(db, namespace, log)
        await _put_collection_state(db, namespace, data.state)
        await _put_app_settings(db, namespace, data.settings)
    except Exception:
        await db.rollback()
        raise
    await db.commit()
