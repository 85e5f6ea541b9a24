"""Tests for the SQLite store."""

import aiosqlite
import pytest

from conftest import NOW, build_item
from memolil.db import sqlite
from memolil.models.knowledge import KnowledgeItemUpdate, QuizMode
from memolil.models.practice import CollectionState
from memolil.models.setup import AppSettings, CollectionExport
from memolil.services.clock import DAY_MS
from memolil.services.practice import record_answer

NS = "personal"


async def _answer(db, item, correct=True, now=NOW, namespace=NS):
    state = await sqlite.get_collection_state(db, namespace)
    outcome = record_answer(
        item, state, "sa", "short", "a check", correct, False, now, "2024-01-01"
    )
    await sqlite.apply_practice_outcome(db, namespace, item.id, outcome)
    return outcome


class TestKnowledgeItems:
    @pytest.mark.asyncio
    async def test_create_and_get_round_trip(self, db):
        item = build_item(tags=["biology", "plants"], last_answer_correct=True)
        stored = await sqlite.create_item(db, NS, item)

        assert stored == item
        assert await sqlite.get_item(db, NS, item.id) == item

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, db):
        assert await sqlite.get_item(db, NS, "nope") is None

    @pytest.mark.asyncio
    async def test_list_newest_first_with_paging(self, db):
        for n in range(5):
            await sqlite.create_item(db, NS, build_item(f"i{n}", created_at=NOW + n))

        items, total = await sqlite.list_items(db, NS, offset=1, limit=2)

        assert total == 5
        assert [i.id for i in items] == ["i3", "i2"]

    @pytest.mark.asyncio
    async def test_list_search_and_tag_filter(self, db):
        await sqlite.create_item(db, NS, build_item("a", title="Mitochondria", tags=["cells"]))
        await sqlite.create_item(db, NS, build_item("b", title="Rivers", content="Water flows", tags=["geo"]))
        await sqlite.create_item(db, NS, build_item("c", title="Deltas", content="Sediment", tags=["geo", "water"]))

        by_title, _ = await sqlite.list_items(db, NS, query="mito")
        by_content, _ = await sqlite.list_items(db, NS, query="WATER")
        by_tag, total = await sqlite.list_items(db, NS, tag="geo")

        assert [i.id for i in by_title] == ["a"]
        assert sorted(i.id for i in by_content) == ["b", "c"]
        assert sorted(i.id for i in by_tag) == ["b", "c"]
        assert total == 2

    @pytest.mark.asyncio
    async def test_update_item(self, db):
        await sqlite.create_item(db, NS, build_item())
        updated = await sqlite.update_item(
            db, NS, "item-1", KnowledgeItemUpdate(title="Renamed", tags=["new"], difficulty=5)
        )

        assert updated.title == "Renamed"
        assert updated.tags == ["new"]
        assert updated.difficulty == 5
        assert updated.content == build_item().content

    @pytest.mark.asyncio
    async def test_update_missing_item(self, db):
        assert await sqlite.update_item(db, NS, "nope", KnowledgeItemUpdate(title="x")) is None

    @pytest.mark.asyncio
    async def test_delete_cascades_to_answer_logs(self, db):
        item = await sqlite.create_item(db, NS, build_item())
        await _answer(db, item)

        assert await sqlite.delete_item(db, NS, item.id) is True
        assert await sqlite.list_answer_logs(db, NS) == []
        assert await sqlite.delete_item(db, NS, item.id) is False

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self, db):
        await sqlite.create_item(db, NS, build_item("shared-id", title="Mine"))
        await sqlite.create_item(db, "group-1", build_item("shared-id", title="Theirs"))

        assert (await sqlite.get_item(db, NS, "shared-id")).title == "Mine"
        assert (await sqlite.get_item(db, "group-1", "shared-id")).title == "Theirs"
        assert await sqlite.count_items(db, NS) == 1
        assert await sqlite.count_items(db, "other") == 0


class TestPracticeOutcome:
    @pytest.mark.asyncio
    async def test_outcome_is_persisted(self, db):
        item = await sqlite.create_item(db, NS, build_item(difficulty=3))
        outcome = await _answer(db, item)

        stored = await sqlite.get_item(db, NS, item.id)
        assert stored.interval_days == 2
        assert stored.next_ask_at == NOW + 2 * DAY_MS
        assert stored.times_asked == 1
        assert stored.last_answer_correct is True

        (log,) = await sqlite.list_answer_logs(db, NS, item_id=item.id)
        assert log == outcome.log

        state = await sqlite.get_collection_state(db, NS)
        assert state == CollectionState(
            total_points=12, daily_practice_streak=1, last_practice_date="2024-01-01"
        )

    @pytest.mark.asyncio
    async def test_points_accumulate(self, db):
        item = await sqlite.create_item(db, NS, build_item(difficulty=1))
        await _answer(db, item)
        item = await sqlite.get_item(db, NS, item.id)
        await _answer(db, item, now=NOW + 1)

        # 5, then 5 + round(5 * 0.25)
        assert (await sqlite.get_collection_state(db, NS)).total_points == 11

    @pytest.mark.asyncio
    async def test_logs_since(self, db):
        item = await sqlite.create_item(db, NS, build_item())
        await _answer(db, item, now=NOW - 10 * DAY_MS)
        await _answer(db, item, now=NOW)

        logs = await sqlite.list_answer_logs(db, NS, since=NOW - DAY_MS)
        assert [log.answered_at for log in logs] == [NOW]


class TestAppSettings:
    @pytest.mark.asyncio
    async def test_defaults(self, db):
        assert await sqlite.get_app_settings(db, NS) == AppSettings()

    @pytest.mark.asyncio
    async def test_save_and_load(self, db):
        custom = AppSettings(questions_per_session=25, default_quiz_mode=QuizMode.MCQ, dark_mode=True)
        await sqlite.save_app_settings(db, NS, custom)

        assert await sqlite.get_app_settings(db, NS) == custom
        assert await sqlite.get_app_settings(db, "group-1") == AppSettings()

    @pytest.mark.asyncio
    async def test_unknown_keys_are_ignored(self, db):
        await sqlite.set_setting(db, NS, "legacy_flag", "true")
        assert await sqlite.get_app_settings(db, NS) == AppSettings()


class TestCollection:
    @pytest.mark.asyncio
    async def test_export_import_into_other_namespace(self, db):
        item = await sqlite.create_item(db, NS, build_item())
        await _answer(db, item)
        await sqlite.save_app_settings(db, NS, AppSettings(questions_per_session=5))

        exported = await sqlite.export_collection(db, NS)
        await sqlite.import_collection(db, "backup", exported)
        restored = await sqlite.export_collection(db, "backup")

        assert restored.knowledge_items == exported.knowledge_items
        assert restored.answer_logs == exported.answer_logs
        assert restored.state == exported.state
        assert restored.settings.questions_per_session == 5
        assert restored.namespace == "backup"

    @pytest.mark.asyncio
    async def test_import_replaces_existing_collection(self, db):
        await sqlite.create_item(db, NS, build_item("old"))
        await sqlite.import_collection(
            db, NS, CollectionExport(knowledge_items=[build_item("new")])
        )

        items, _ = await sqlite.list_items(db, NS)
        assert [i.id for i in items] == ["new"]

    @pytest.mark.asyncio
    async def test_import_drops_logs_of_unknown_items(self, db):
        item = await sqlite.create_item(db, NS, build_item("kept"))
        await _answer(db, item)
        exported = await sqlite.export_collection(db, NS)

        await sqlite.import_collection(
            db, "group-1", exported.model_copy(update={"knowledge_items": []})
        )
        assert await sqlite.list_answer_logs(db, "group-1") == []

    @pytest.mark.asyncio
    async def test_failed_import_keeps_previous_collection(self, db):
        item = await sqlite.create_item(db, NS, build_item("keep-me"))
        await _answer(db, item)
        await sqlite.save_app_settings(db, NS, AppSettings(dark_mode=True))
        before = await sqlite.export_collection(db, NS)

        # Skips validation so the duplicate reaches the store
        broken = CollectionExport.model_construct(
            knowledge_items=[build_item("dup"), build_item("dup")]
        )
        with pytest.raises(aiosqlite.IntegrityError):
            await sqlite.import_collection(db, NS, broken)

        assert await sqlite.export_collection(db, NS) == before

    @pytest.mark.asyncio
    async def test_reset_only_touches_one_namespace(self, db):
        await sqlite.create_item(db, NS, build_item("a"))
        await sqlite.create_item(db, "group-1", build_item("b"))
        await sqlite.save_app_settings(db, NS, AppSettings(dark_mode=True))

        await sqlite.reset_collection(db, NS)

        assert await sqlite.count_items(db, NS) == 0
        assert await sqlite.count_items(db, "group-1") == 1
        assert await sqlite.get_app_settings(db, NS) == AppSettings()
        assert await sqlite.get_collection_state(db, NS) == CollectionState()
