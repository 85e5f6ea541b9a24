from __future__ import annotations

import uuid

from memolil.models.knowledge import KnowledgeItem
from memolil.services.clock import DAY_MS
from memolil.services.question_synthesizer import synthesize_questions

# title, content, tags, difficulty, age in days, due offset in days, interval,
# times asked, times correct, streak, days since last answer
_SAMPLES = [
    (
        "React useEffect Hook",
        "useEffect is a React Hook that lets you synchronize a component with an "
        "external system. It runs after every render by default, but you can control "
        "when it runs by passing a dependency array. The cleanup function returned from "
        "useEffect runs before the component unmounts or before the effect runs again.",
        ["react", "hooks", "javascript"],
        3, 10, -2, 3, 5, 4, 2, 3,
    ),
    (
        "Python List Comprehension",
        "List comprehensions provide a concise way to create lists in Python. The syntax "
        "is [expression for item in iterable if condition]. They are more readable and "
        "often faster than traditional for loops.",
        ["python", "syntax", "programming"],
        2, 7, 0, 2, 3, 3, 3, 2,
    ),
    (
        "Photosynthesis",
        "Photosynthesis is the process plants use to turn light into chemical energy. "
        "Chlorophyll absorbs mostly red and blue light and reflects green. "
        "More light increases the rate of photosynthesis up to a saturation point.",
        ["biology", "plants"],
        2, 5, 1, 1, 1, 0, 0, 1,
    ),
    (
        "HTTP Status Codes",
        "HTTP status codes are grouped by their first digit. 2xx codes mean the request "
        "succeeded; 4xx codes are client errors such as 404 Not Found; 5xx codes are "
        "server errors. A 304 response allows the client to reuse its cached copy.",
        ["web", "http"],
        4, 3, -1, 1, 0, 0, 0, None,
    ),
]


def seed_items(now: int) -> list[KnowledgeItem]:
    """Sample items with staggered schedules and locally synthesized questions."""
    items: list[KnowledgeItem] = []
    for (
        title, content, tags, difficulty, age, due_in, interval,
        asked, correct, streak, since_answer,
    ) in _SAMPLES:
        created = now - age * DAY_MS
        item = KnowledgeItem(
            id=str(uuid.uuid4()),
            title=title,
            content=content,
            tags=tags,
            difficulty=difficulty,
            source="seed",
            created_at=created,
            introduced_at=created,
            next_ask_at=now + due_in * DAY_MS,
            interval_days=interval,
            times_asked=asked,
            times_correct=correct,
            current_streak=streak,
            last_answered_at=None if since_answer is None else now - since_answer * DAY_MS,
            last_answer_correct=None if asked == 0 else streak > 0,
        )
        items.append(item.model_copy(update={"question_variants": synthesize_questions(item)}))
    return items
