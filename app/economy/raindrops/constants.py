from __future__ import annotations

TIER_ADVANCED = "ADVANCED"
TIER_EXPERT = "EXPERT"

# Ordered from the lowest threshold up.
UNLOCK_THRESHOLDS: tuple[tuple[str, int], ...] = (
    (TIER_ADVANCED, 25),
    (TIER_EXPERT, 75),
)

UNLOCK_TIER_NAMES: dict[str, str] = {
    TIER_ADVANCED: "Advanced Challenges",
    TIER_EXPERT: "Expert Challenges",
}
UNLOCK_TIER_DESCRIPTIONS: dict[str, str] = {
    TIER_ADVANCED: "Unlock advanced difficulty battles",
    TIER_EXPERT: "Unlock expert difficulty battles with higher rewards",
}

RAINDROPS_PER_LEVEL = 50
RAINDROPS_PER_CUP = 100

TEST_ATTEMPT_STATUS_COMPLETED = "COMPLETED"
