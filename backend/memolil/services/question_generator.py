"""
Question generation service.

For one knowledge item:
  1. Calls the LLM via llm_service.chat_json()
  2. Parses {"questions": [...]} (a bare JSON array is accepted too)
  3. Validates every entry into a QuestionVariant with a fresh id

Soft failures: an unavailable LLM, invalid JSON, or an empty/malformed
question list all fall back to the local synthesizer. Never raises.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from pydantic import ValidationError

from memolil.models.knowledge import KnowledgeItem, QuestionVariant, question_variants_adapter
from memolil.services.llm_service import LLMUnavailableError, chat_json
from memolil.services.question_synthesizer import synthesize_questions

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a learning assistant that creates quiz questions. "
    "Given a knowledge item, generate exactly 3 questions: "
    "one multiple choice question with 4 options, "
    "one short answer question with 2-3 acceptable answers, "
    "and one flashcard.\n"
    "Respond ONLY with valid JSON in exactly this structure:\n"
    '{"questions": ['
    '{"type": "mcq", "prompt": "string", "choices": '
    '[{"text": "string", "is_correct": true}, {"text": "string", "is_correct": false}]}, '
    '{"type": "short", "prompt": "string", "accepted_answers": ["string"], '
    '"answer_guidance": "string"}, '
    '{"type": "flashcard", "front": "string", "back": "string"}]}\n'
    "Rules:\n"
    "- Exactly one mcq choice has is_correct true.\n"
    "- Questions must be answerable from the content alone."
)


def _user_prompt(item: KnowledgeItem) -> str:
    return (
        f"Title: {item.title}\n"
        f"Content: {item.content[:3000]}\n"
        f"Tags: {', '.join(item.tags)}\n"
        f"Difficulty: {item.difficulty}/5"
    )


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    """Fill in ids and the fields the model tends to leave out."""
    q = dict(raw)
    q["id"] = str(uuid.uuid4())
    q_type = q.get("type")

    if q_type == "mcq":
        raw_choices = q.get("choices")
        if not isinstance(raw_choices, list):
            raw_choices = []
        # Only a JSON true marks the answer; "false" and 1 do not
        choices = [
            {"text": c.get("text", ""), "is_correct": c.get("is_correct", c.get("isCorrect")) is True}
            for c in raw_choices
            if isinstance(c, dict)
        ]
        q["choices"] = choices
        q["correct_choice_index"] = next(
            (i for i, c in enumerate(choices) if c["is_correct"]), -1
        )
    elif q_type == "short":
        q.setdefault("accepted_answers", q.pop("acceptedAnswers", []))
        q.setdefault("answer_guidance", q.pop("answerGuidance", None))
    elif q_type == "flashcard":
        q.setdefault("front", q.get("prompt", ""))
        q.setdefault("prompt", q["front"])
        q.setdefault("back", "")

    return q


def parse_questions(result: Any) -> list[QuestionVariant]:
    """
    Turn an LLM response into variants.
    Raises ValueError / ValidationError if the shape is wrong (caller handles).
    """
    if isinstance(result, dict):
        result = result.get("questions")
    if not isinstance(result, list):
        raise ValueError("LLM response has no question list")
    return question_variants_adapter.validate_python(
        [_normalize(q) for q in result if isinstance(q, dict)]
    )


async def generate_questions(item: KnowledgeItem) -> list[QuestionVariant]:
    """
    Generate question variants for `item`, falling back to local synthesis.
    """
    try:
        result = await chat_json(SYSTEM_PROMPT, _user_prompt(item), max_tokens=1024)
        questions = parse_questions(result)
    except LLMUnavailableError as e:
        logger.info("LLM unavailable for item %s, using local synthesis: %s", item.id, e)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        logger.warning("Malformed LLM questions for item %s: %s", item.id, e)
    except Exception as e:
        logger.warning("Question generation failed for item %s: %s", item.id, e)
    else:
        if questions:
            logger.info("Generated %d questions for item %s via LLM", len(questions), item.id)
            return questions
        logger.warning("LLM returned no questions for item %s", item.id)

    return synthesize_questions(item)
