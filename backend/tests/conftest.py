import os
import random

import pytest

# Set test environment variables before the app reads its settings
os.environ["MEMOLIL_SEED_ON_EMPTY"] = "false"
os.environ["MEMOLIL_LLM_MODEL"] = ""
os.environ["MEMOLIL_LOG_LEVEL"] = "warning"

from memolil.models.knowledge import (  # noqa: E402
    FlashcardVariant,
    KnowledgeItem,
    McqChoice,
    McqVariant,
    ShortVariant,
)
from memolil.services.clock import DAY_MS  # noqa: E402

# 2024-01-01T12:00:00Z
NOW = 1_704_110_400_000


def flashcard(variant_id: str = "fc") -> FlashcardVariant:
    return FlashcardVariant(id=variant_id, prompt="Front?", front="Front?", back="Back")


def short(variant_id: str = "sa") -> ShortVariant:
    return ShortVariant(
        id=variant_id,
        prompt="What is a test?",
        accepted_answers=["a check", "a check of behaviour"],
    )


def mcq(variant_id: str = "mc", correct_index: int = 2) -> McqVariant:
    choices = [McqChoice(text=f"choice {i}", is_correct=i == correct_index) for i in range(4)]
    return McqVariant(
        id=variant_id,
        prompt="Which one?",
        choices=choices,
        correct_choice_index=correct_index,
    )


def build_item(item_id: str = "item-1", **overrides) -> KnowledgeItem:
    fields = {
        "id": item_id,
        "title": "Photosynthesis",
        "content": "Photosynthesis is the process plants use to turn light into energy.",
        "tags": ["biology"],
        "difficulty": 3,
        "created_at": NOW - 10 * DAY_MS,
        "introduced_at": NOW - 10 * DAY_MS,
        "next_ask_at": NOW - DAY_MS,
        "interval_days": 1,
        "question_variants": [flashcard(), short(), mcq()],
    }
    fields.update(overrides)
    return KnowledgeItem(**fields)


@pytest.fixture
def make_item():
    return build_item


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
async def db(tmp_path):
    from memolil.db.sqlite import get_db, init_sqlite

    await init_sqlite(tmp_path)
    async for conn in get_db():
        yield conn


@pytest.fixture
def client(tmp_path, monkeypatch):
    from fastapi.testclient import TestClient

    from memolil import create_app
    from memolil.config import settings
    from memolil.services.clock import get_now

    monkeypatch.setattr(settings, "memolil_data_dir", tmp_path / "data")
    app = create_app()
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as test_client:
        yield test_client
