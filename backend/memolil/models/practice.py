from __future__ import annotations

from pydantic import BaseModel, Field

from memolil.models.knowledge import KnowledgeItem, QuestionType, QuestionVariant, QuizMode


class ScheduleUpdate(BaseModel):
    next_ask_at: int
    interval_days: int
    current_streak: int
    times_asked: int
    times_correct: int
    last_answered_at: int
    last_answer_correct: bool


class ScoreResult(BaseModel):
    points: int = 0
    base_points: int = 0
    streak_bonus: int = 0
    time_gap_bonus: int = 0


class DailyStreakUpdate(BaseModel):
    streak: int
    today: str  # YYYY-MM-DD


class CollectionState(BaseModel):
    total_points: int = 0
    daily_practice_streak: int = 0
    last_practice_date: str | None = None


class AnswerLog(BaseModel):
    id: str
    knowledge_item_id: str
    question_variant_id: str
    answered_at: int
    mode: QuestionType
    user_answer: str
    is_correct: bool
    points_awarded: int
    skipped: bool = False


class PracticeOutcome(BaseModel):
    """Everything one answer event changes; merged into the store by the caller."""

    log: AnswerLog
    score: ScoreResult
    schedule: ScheduleUpdate
    state: CollectionState


# --- Request / response bodies ---


class SessionRequest(BaseModel):
    mode: QuizMode | None = None
    max_count: int | None = Field(default=None, ge=1, le=50)


class SessionQuestion(BaseModel):
    item: KnowledgeItem
    variant_index: int
    variant: QuestionVariant


class Session(BaseModel):
    mode: QuizMode
    questions: list[SessionQuestion]


class AnswerRequest(BaseModel):
    item_id: str
    variant_id: str
    user_answer: str = ""
    skipped: bool = False


class AnswerResult(BaseModel):
    correct: bool
    score: ScoreResult
    schedule: ScheduleUpdate
    daily_practice_streak: int
    total_points: int
    log_id: str


class DueSummary(BaseModel):
    total_items: int
    practicable: int
    due_now: int


class AnswerLogList(BaseModel):
    items: list[AnswerLog]
    total: int
