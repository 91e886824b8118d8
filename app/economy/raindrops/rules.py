from __future__ import annotations

from app.economy.raindrops.constants import (
    RAINDROPS_PER_CUP,
    RAINDROPS_PER_LEVEL,
    UNLOCK_THRESHOLDS,
    UNLOCK_TIER_DESCRIPTIONS,
    UNLOCK_TIER_NAMES,
)
from app.economy.raindrops.types import RaindropProgress, UnlockTierStatus

_THRESHOLD_BY_TIER: dict[str, int] = dict(UNLOCK_THRESHOLDS)


def required_raindrops(tier: str) -> int | None:
    return _THRESHOLD_BY_TIER.get(tier)


def can_access_difficulty(total_raindrops: int, tier: str) -> bool:
    required = required_raindrops(tier)
    if required is None:
        return False
    return total_raindrops >= required


def available_tiers(total_raindrops: int) -> dict[str, UnlockTierStatus]:
    statuses: dict[str, UnlockTierStatus] = {}
    for tier, required in UNLOCK_THRESHOLDS:
        statuses[tier] = UnlockTierStatus(
            tier=tier,
            name=UNLOCK_TIER_NAMES[tier],
            description=UNLOCK_TIER_DESCRIPTIONS[tier],
            unlocked=can_access_difficulty(total_raindrops, tier),
            required=required,
            missing=max(0, required - total_raindrops),
        )
    return statuses


def build_raindrop_progress(total_raindrops: int) -> RaindropProgress:
    total = max(0, int(total_raindrops))
    return RaindropProgress(
        total_raindrops=total,
        level=total // RAINDROPS_PER_LEVEL + 1,
        cups_filled=total // RAINDROPS_PER_CUP,
        cup_progress=total % RAINDROPS_PER_CUP,
    )
