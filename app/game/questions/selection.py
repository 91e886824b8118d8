from __future__ import annotations

import random
from collections.abc import Sequence


def select_question_ids(
    candidate_ids: Sequence[str],
    *,
    count: int,
    selection_seed: str,
) -> list[str]:
    """Uniform draw without replacement, reproducible for a given seed."""
    ordered = sorted(dict.fromkeys(str(question_id) for question_id in candidate_ids))
    if len(ordered) < count:
        raise ValueError(f"need {count} candidates, got {len(ordered)}")
    rng = random.Random(selection_seed)
    return rng.sample(ordered, count)
