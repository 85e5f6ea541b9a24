from pydantic import BaseModel


class ItemStreak(BaseModel):
    id: str
    title: str
    current_streak: int
    interval_days: int


class ItemAccuracy(BaseModel):
    id: str
    title: str
    accuracy: float


class TagAccuracy(BaseModel):
    tag: str
    accuracy: float
    total: int


class DayPoints(BaseModel):
    date: str
    points: int


class DayAccuracy(BaseModel):
    date: str
    accuracy: float


class IntervalBucket(BaseModel):
    range: str
    count: int


class StatsSummary(BaseModel):
    total_points: int
    daily_practice_streak: int
    total_items: int
    total_attempts: int
    overall_retention: float
    last_30_days_retention: float
    points_this_week: int
    points_this_month: int
    top_items: list[ItemStreak]
    most_forgotten_tags: list[TagAccuracy]
    hardest_items: list[ItemAccuracy]
    ready_to_level_up: list[ItemStreak]
    points_per_day: list[DayPoints]
    accuracy_per_day: list[DayAccuracy]
    interval_distribution: list[IntervalBucket]
