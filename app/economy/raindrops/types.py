from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UnlockTierStatus:
    tier: str
    name: str
    description: str
    unlocked: bool
    required: int
    missing: int


@dataclass(frozen=True, slots=True)
class RaindropProgress:
    total_raindrops: int
    level: int
    cups_filled: int
    cup_progress: int
