from collections import Counter

from pydantic import BaseModel, Field, model_validator

from memolil.models.knowledge import KnowledgeItem, QuizMode
from memolil.models.practice import AnswerLog, CollectionState


class AppSettings(BaseModel):
    questions_per_session: int = Field(default=10, ge=1, le=50)
    default_quiz_mode: QuizMode = QuizMode.MIXED
    show_explanations: bool = True
    dark_mode: bool = False


class AppSettingsUpdate(BaseModel):
    questions_per_session: int | None = Field(default=None, ge=1, le=50)
    default_quiz_mode: QuizMode | None = None
    show_explanations: bool | None = None
    dark_mode: bool | None = None


def _duplicates(ids: list[str]) -> list[str]:
    return sorted(i for i, n in Counter(ids).items() if n > 1)


class CollectionExport(BaseModel):
    version: str = "1.0.0"
    namespace: str | None = None
    knowledge_items: list[KnowledgeItem] = []
    answer_logs: list[AnswerLog] = []
    state: CollectionState = CollectionState()
    settings: AppSettings = AppSettings()

    @model_validator(mode="after")
    def check_unique_ids(self) -> "CollectionExport":
        dup_items = _duplicates([item.id for item in self.knowledge_items])
        if dup_items:
            raise ValueError(f"duplicate knowledge item ids: {', '.join(dup_items)}")
        dup_logs = _duplicates([log.id for log in self.answer_logs])
        if dup_logs:
            raise ValueError(f"duplicate answer log ids: {', '.join(dup_logs)}")
        return self
