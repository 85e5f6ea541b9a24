from memolil.models.knowledge import (
    FlashcardVariant,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemList,
    KnowledgeItemUpdate,
    McqChoice,
    McqVariant,
    QuestionType,
    QuestionVariant,
    QuizMode,
    ShortVariant,
)
from memolil.models.practice import (
    AnswerLog,
    CollectionState,
    DailyStreakUpdate,
    PracticeOutcome,
    ScheduleUpdate,
    ScoreResult,
)
from memolil.models.setup import AppSettings, AppSettingsUpdate, CollectionExport
from memolil.models.stats import StatsSummary

__all__ = [
    "AnswerLog",
    "AppSettings",
    "AppSettingsUpdate",
    "CollectionExport",
    "CollectionState",
    "DailyStreakUpdate",
    "FlashcardVariant",
    "KnowledgeItem",
    "KnowledgeItemCreate",
    "KnowledgeItemList",
    "KnowledgeItemUpdate",
    "McqChoice",
    "McqVariant",
    "PracticeOutcome",
    "QuestionType",
    "QuestionVariant",
    "QuizMode",
    "ScheduleUpdate",
    "ScoreResult",
    "ShortVariant",
    "StatsSummary",
]
