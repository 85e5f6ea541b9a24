from __future__ import annotations

import random

from memolil.models.knowledge import KnowledgeItem, QuizMode

_rng = random.Random()


def select_variant_index(
    item: KnowledgeItem,
    mode: QuizMode | str,
    rng: random.Random | None = None,
) -> int:
    """
    Index of the question variant to present for `mode`.

    Falls back to 0 when the item has no variant of the requested type, so the
    returned variant's type is not guaranteed to match `mode`.
    """
    rng = rng or _rng
    mode = QuizMode(mode)
    variants = item.question_variants

    if mode is QuizMode.MIXED:
        if not variants:
            return 0
        return rng.randrange(len(variants))

    matching = [i for i, v in enumerate(variants) if v.type == mode.value]
    if not matching:
        return 0
    return rng.choice(matching)
