from __future__ import annotations

import re

from memolil.models.knowledge import FlashcardVariant, McqVariant, QuestionVariant, ShortVariant

FLASHCARD_CORRECT = "correct"

_WS_RE = re.compile(r"\s+")


def normalize_answer(text: str) -> str:
    text = _WS_RE.sub(" ", text.strip().lower())
    return text.rstrip(".!?;:, ")


def check_short_answer(user_answer: str, accepted_answers: list[str]) -> bool:
    answer = normalize_answer(user_answer)
    if not answer:
        return False
    for accepted in accepted_answers:
        expected = normalize_answer(accepted)
        if expected and (answer == expected or expected in answer):
            return True
    return False


def check_answer(variant: QuestionVariant, user_answer: str) -> bool:
    """
    Grade `user_answer` against `variant`.

    mcq: the answer is the chosen index as a string.
    short: matched against the accepted answers, ignoring case and punctuation.
    flashcard: self-graded; the client sends "correct" when the user knew it.
    """
    if isinstance(variant, McqVariant):
        try:
            return int(user_answer.strip()) == variant.correct_choice_index
        except ValueError:
            return False
    if isinstance(variant, ShortVariant):
        return check_short_answer(user_answer, variant.accepted_answers)
    if isinstance(variant, FlashcardVariant):
        return user_answer.strip().lower() == FLASHCARD_CORRECT
    return False
