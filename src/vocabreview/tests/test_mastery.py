"""Tests for mastery estimation."""
import pytest

from vocabreview.config import MasterySettings
from vocabreview.services.mastery import estimate_mastery


def test_no_attempts_is_zero() -> None:
    """Test that a word never attempted has no mastery."""
    assert estimate_mastery(0, 0, 0) == 0


@pytest.mark.parametrize(
    "correct, total, streak, expected",
    [
        (1, 1, 1, 75),  # 70 + 5
        (0, 1, 0, 0),
        (1, 2, 0, 35),
        (2, 3, 2, 57),  # 46.67 + 10
        (4, 4, 4, 90),  # 70 + 20
        (10, 10, 10, 100),  # bonus capped at 30
        (3, 4, 1, 58),  # 52.5 + 5 rounds half up
    ],
)
def test_mastery_formula(correct: int, total: int, streak: int, expected: int) -> None:
    """Test accuracy weighting and the capped streak bonus."""
    assert estimate_mastery(correct, total, streak) == expected


def test_mastery_bounds() -> None:
    """Test that mastery always stays within 0-100."""
    for total in range(0, 25):
        for correct in range(0, total + 1):
            for streak in range(0, correct + 1):
                assert 0 <= estimate_mastery(correct, total, streak) <= 100


def test_streak_bonus_cap() -> None:
    """Test that a long streak adds at most the configured cap."""
    assert estimate_mastery(1, 2, 6) == estimate_mastery(1, 2, 60) == 65


def test_custom_weights() -> None:
    """Test alternate mastery weights."""
    config = MasterySettings(accuracy_weight=50, streak_bonus_per_answer=10, streak_bonus_cap=50)
    assert estimate_mastery(1, 1, 2, config) == 70
