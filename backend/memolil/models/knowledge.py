from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator


class QuestionType(str, Enum):
    FLASHCARD = "flashcard"
    SHORT = "short"
    MCQ = "mcq"


class QuizMode(str, Enum):
    MIXED = "mixed"
    FLASHCARD = "flashcard"
    SHORT = "short"
    MCQ = "mcq"


class McqChoice(BaseModel):
    text: str
    is_correct: bool = False


class FlashcardVariant(BaseModel):
    id: str
    type: Literal["flashcard"] = "flashcard"
    prompt: str
    front: str
    back: str


class ShortVariant(BaseModel):
    id: str
    type: Literal["short"] = "short"
    prompt: str
    accepted_answers: list[str]
    answer_guidance: str | None = None


class McqVariant(BaseModel):
    id: str
    type: Literal["mcq"] = "mcq"
    prompt: str
    choices: list[McqChoice]
    correct_choice_index: int

    @model_validator(mode="after")
    def check_exactly_one_correct(self) -> McqVariant:
        correct = [i for i, c in enumerate(self.choices) if c.is_correct]
        if len(correct) != 1:
            raise ValueError("mcq must have exactly one correct choice")
        if correct[0] != self.correct_choice_index:
            raise ValueError("correct_choice_index does not point at the correct choice")
        return self


QuestionVariant = Annotated[
    Union[FlashcardVariant, ShortVariant, McqVariant],
    Field(discriminator="type"),
]

question_variants_adapter: TypeAdapter[list[QuestionVariant]] = TypeAdapter(
    list[QuestionVariant]
)


def _dedupe_tags(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class KnowledgeItem(BaseModel):
    id: str
    title: str
    content: str
    tags: list[str] = []
    difficulty: int = 2
    source: str = "typed"
    created_at: int
    question_variants: list[QuestionVariant] = []
    # Scheduling state; only ever replaced wholesale by a ScheduleUpdate
    introduced_at: int
    next_ask_at: int
    interval_days: int = Field(default=1, ge=0)
    times_asked: int = Field(default=0, ge=0)
    times_correct: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    last_answered_at: int | None = None
    last_answer_correct: bool | None = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return _dedupe_tags(v)

    @model_validator(mode="after")
    def check_correct_within_asked(self) -> KnowledgeItem:
        if self.times_correct > self.times_asked:
            raise ValueError("times_correct cannot exceed times_asked")
        return self


class KnowledgeItemCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    tags: list[str] = []
    difficulty: int = Field(default=2, ge=1, le=5)
    source: str = "typed"

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return _dedupe_tags(v)


class KnowledgeItemUpdate(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None
    difficulty: int | None = Field(default=None, ge=1, le=5)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _dedupe_tags(v)


class KnowledgeItemList(BaseModel):
    items: list[KnowledgeItem]
    total: int
    offset: int
    limit: int
