"""Mastery score estimation."""
import math
from typing import Optional

from vocabreview.config import MasterySettings, settings


def estimate_mastery(
    correct_attempts: int,
    total_attempts: int,
    streak_count: int,
    config: Optional[MasterySettings] = None,
) -> int:
    """Estimate a 0-100 mastery score from attempt statistics.

    Accuracy carries most of the weight; a capped bonus for the current
    streak rewards recent, sustained success.
    """
    config = config or settings.mastery
    if total_attempts <= 0:
        return 0

    accuracy = correct_attempts / total_attempts
    streak_bonus = min(streak_count * config.streak_bonus_per_answer, config.streak_bonus_cap)
    # Round half up
    score = math.floor(accuracy * config.accuracy_weight + streak_bonus + 0.5)
    return max(0, min(score, 100))
