from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BattleQuestion:
    question_id: str
    text: str
    options: tuple[str, ...]
    correct_answer: str
    difficulty: str
    explanation: str | None = None
