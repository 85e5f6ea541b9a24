"""
Local question synthesis.

Used whenever the LLM generator is unavailable or returns nothing usable.
Produces, in order:
  1. one flashcard from the title and the first line of the content
  2. up to two short-answer questions from key statements
  3. up to one multiple-choice question with three distractors

Key statements are fragments of the content (split on '.', ';' and newlines)
strictly between MIN_STATEMENT_CHARS and MAX_STATEMENT_CHARS long.
"""
from __future__ import annotations

import random
import re
import uuid

from memolil.models.knowledge import (
    FlashcardVariant,
    KnowledgeItem,
    McqChoice,
    McqVariant,
    QuestionVariant,
    ShortVariant,
)

MIN_STATEMENT_CHARS = 20
MAX_STATEMENT_CHARS = 200
MAX_KEY_STATEMENTS = 3
MAX_SHORT_ANSWERS = 2
MAX_MCQS = 1
FLASHCARD_BACK_CHARS = 200
ANSWER_WORDS = 10
DISTRACTOR_COUNT = 3

GENERIC_DISTRACTORS = (
    "This concept is not related to the main topic",
    "This statement contradicts the core principle",
    "This is a common misconception about the subject",
)

_POLARITY = {
    "increases": "decreases",
    "helps": "prevents",
    "allows": "restricts",
    "improves": "worsens",
}
_POLARITY.update({v: k for k, v in list(_POLARITY.items())})
_POLARITY_RE = re.compile(r"\b(" + "|".join(_POLARITY) + r")\b", re.IGNORECASE)

_rng = random.Random()


def _new_id() -> str:
    return str(uuid.uuid4())


def extract_key_statements(content: str) -> list[str]:
    fragments = (s.strip() for s in re.split(r"[.\n;]", content))
    statements = [
        s for s in fragments if MIN_STATEMENT_CHARS < len(s) < MAX_STATEMENT_CHARS
    ]
    return statements[:MAX_KEY_STATEMENTS]


def to_question(statement: str) -> str:
    lower = statement.lower()

    for verb in (" is ", " are "):
        pos = lower.find(verb)
        if pos >= 0:
            return f"What{statement[pos:]}?"

    if " helps " in lower or " allows " in lower:
        return f"How does this work: {statement}?"

    return f"Explain: {statement}"


def short_answer(statement: str) -> str:
    words = statement.split(" ")
    if len(words) > ANSWER_WORDS:
        return " ".join(words[:ANSWER_WORDS])
    return statement


def flip_polarity(statement: str) -> str:
    def _swap(match: re.Match[str]) -> str:
        word = match.group(0)
        flipped = _POLARITY[word.lower()]
        return flipped.capitalize() if word[0].isupper() else flipped

    return _POLARITY_RE.sub(_swap, statement)


def make_flashcard(item: KnowledgeItem) -> FlashcardVariant:
    front = item.title if item.title.endswith("?") else f"{item.title}?"
    back = item.content.split("\n")[0][:FLASHCARD_BACK_CHARS]
    return FlashcardVariant(id=_new_id(), prompt=front, front=front, back=back)


def make_short_answers(item: KnowledgeItem) -> list[ShortVariant]:
    return [
        ShortVariant(
            id=_new_id(),
            prompt=to_question(statement),
            accepted_answers=[short_answer(statement), statement],
            answer_guidance=f"Key concept: {item.title}",
        )
        for statement in extract_key_statements(item.content)[:MAX_SHORT_ANSWERS]
    ]


def make_distractors(
    content: str, correct: str, rng: random.Random | None = None
) -> list[str]:
    rng = rng or _rng
    distractors: list[str] = []

    flipped = flip_polarity(correct)
    if flipped != correct:
        distractors.append(flipped)

    words = content.split()
    if len(words) > ANSWER_WORDS:
        start = rng.randrange(len(words) - ANSWER_WORDS)
        window = " ".join(words[start:start + ANSWER_WORDS])
        if window != correct and window not in distractors:
            distractors.append(window)

    generic = rng.choice(GENERIC_DISTRACTORS)
    if generic not in distractors:
        distractors.append(generic)

    while len(distractors) < DISTRACTOR_COUNT:
        distractors.append(f"Alternative explanation {len(distractors) + 1}")

    return distractors[:DISTRACTOR_COUNT]


def make_mcqs(item: KnowledgeItem, rng: random.Random | None = None) -> list[McqVariant]:
    rng = rng or _rng
    questions: list[McqVariant] = []

    for statement in extract_key_statements(item.content)[:MAX_MCQS]:
        choices = [McqChoice(text=statement, is_correct=True)]
        choices.extend(
            McqChoice(text=text) for text in make_distractors(item.content, statement, rng)
        )
        rng.shuffle(choices)
        correct_index = next(i for i, c in enumerate(choices) if c.is_correct)

        questions.append(
            McqVariant(
                id=_new_id(),
                prompt=f'Which statement about "{item.title}" is correct?',
                choices=choices,
                correct_choice_index=correct_index,
            )
        )

    return questions


def synthesize_questions(
    item: KnowledgeItem, rng: random.Random | None = None
) -> list[QuestionVariant]:
    variants: list[QuestionVariant] = [make_flashcard(item)]
    variants.extend(make_short_answers(item))
    variants.extend(make_mcqs(item, rng))
    return variants
