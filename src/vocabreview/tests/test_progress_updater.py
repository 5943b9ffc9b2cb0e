"""Tests for the progress updater."""
from datetime import timedelta

import pytest

from vocabreview.config import Settings
from vocabreview.errors import InvalidInputError
from vocabreview.models.progress_models import LearningPhase
from vocabreview.services.phase_machine import PHASE_ORDER
from vocabreview.services.progress_updater import ProgressUpdater


@pytest.fixture
def updater(test_settings: Settings) -> ProgressUpdater:
    """Create a progress updater with default settings."""
    return ProgressUpdater(test_settings)


def test_new_record(updater: ProgressUpdater, today) -> None:
    """Test the lazily created record."""
    record = updater.new_record("learner-1", "word-1", today)

    assert record.phase == LearningPhase.RECOGNITION
    assert record.mastery_level == 0
    assert record.retention_level == 0
    assert record.attempts == 0
    assert record.next_review_date == today
    assert record.id is None


def test_first_correct_attempt(updater: ProgressUpdater, now, today) -> None:
    """Test a first correct attempt on a new record."""
    record = updater.new_record("learner-1", "word-1", today)

    updated = updater.record_attempt(record, True, 10, now=now)

    assert updated.attempts == 1
    assert updated.correct_attempts == 1
    assert updated.streak_count == 1
    assert updated.retention_level == 1
    assert updated.review_interval == 3
    assert updated.next_review_date == today + timedelta(days=3)
    assert updated.mastery_level == 75
    assert updated.phase == LearningPhase.RECOGNITION
    assert updated.total_study_time_seconds == 10
    assert updated.last_seen_at == now
    assert updated.last_correct_at == now
    assert updated.is_memorized is False
    assert updated.needs_review is False


def test_phase_advances_after_streak(updater: ProgressUpdater, make_record, now) -> None:
    """Test that high mastery with a streak moves the word on one phase."""
    record = make_record(
        attempts=3, correct_attempts=3, streak_count=3, mastery_level=85, retention_level=3
    )

    updated = updater.record_attempt(record, True, 5, now=now)

    assert updated.mastery_level == 90
    assert updated.phase == LearningPhase.UNDERSTANDING


def test_incorrect_at_bottom_of_ladder(updater: ProgressUpdater, make_record, now, today) -> None:
    """Test that a mistake at level 0 stays at level 0, due tomorrow."""
    record = make_record(attempts=2, correct_attempts=1, streak_count=1, retention_level=0)

    updated = updater.record_attempt(record, False, 4, now=now)

    assert updated.retention_level == 0
    assert updated.next_review_date == today + timedelta(days=1)
    assert updated.streak_count == 0
    assert updated.needs_review is True


def test_incorrect_drops_one_level(updater: ProgressUpdater, make_record, now, today) -> None:
    """Test that a mistake moves exactly one level down."""
    last_correct = now - timedelta(days=15)
    record = make_record(
        attempts=5, correct_attempts=5, streak_count=5, retention_level=4,
        last_correct_at=last_correct,
    )

    updated = updater.record_attempt(record, False, 4, now=now)

    assert updated.retention_level == 3
    assert updated.next_review_date == today + timedelta(days=15)
    assert updated.correct_attempts == 5
    assert updated.last_correct_at == last_correct


def test_correct_streak_never_lowers_level(updater: ProgressUpdater, today, now) -> None:
    """Test that consecutive correct attempts climb the ladder and hold at the top."""
    record = updater.new_record("learner-1", "word-1", today)
    levels = []
    for _ in range(10):
        record = updater.record_attempt(record, True, 1, now=now)
        levels.append(record.retention_level)

    assert levels == [1, 2, 3, 4, 5, 6, 6, 6, 6, 6]
    assert record.next_review_date == today + timedelta(days=120)


def test_phase_never_skips_or_regresses(updater: ProgressUpdater, today, now) -> None:
    """Test automatic phase changes over a long mixed run."""
    record = updater.new_record("learner-1", "word-1", today)
    outcomes = [True] * 6 + [False] + [True] * 8 + [False, False] + [True] * 6

    for is_correct in outcomes:
        before = PHASE_ORDER.index(record.phase)
        record = updater.record_attempt(record, is_correct, 1, now=now)
        after = PHASE_ORDER.index(record.phase)
        assert after - before in (0, 1)
        assert record.correct_attempts <= record.attempts
        assert 0 <= record.retention_level <= 6


def test_reaching_mastery_marks_memorized(updater: ProgressUpdater, make_record, now) -> None:
    """Test that a word is memorized once it reaches MASTERY with high mastery."""
    record = make_record(
        phase=LearningPhase.APPLICATION,
        attempts=5, correct_attempts=5, streak_count=5, mastery_level=95, retention_level=5,
    )

    updated = updater.record_attempt(record, True, 3, now=now)

    assert updated.phase == LearningPhase.MASTERY
    assert updated.mastery_level == 100
    assert updated.is_memorized is True


def test_low_mastery_needs_review_even_when_correct(updater: ProgressUpdater, make_record, now) -> None:
    """Test that low mastery keeps the review flag after a correct answer."""
    record = make_record(attempts=3, correct_attempts=1, streak_count=0)

    updated = updater.record_attempt(record, True, 3, now=now)

    assert updated.mastery_level == 40
    assert updated.needs_review is True


def test_explicit_phase_override(updater: ProgressUpdater, make_record, now) -> None:
    """Test that a caller supplied phase replaces the automatic one."""
    record = make_record(phase=LearningPhase.MASTERY, attempts=9, correct_attempts=9, streak_count=9)

    updated = updater.record_attempt(record, True, 3, explicit_phase="RECOGNITION", now=now)

    assert updated.phase == LearningPhase.RECOGNITION
    assert updated.is_memorized is False


def test_input_record_is_not_modified(updater: ProgressUpdater, make_record, now) -> None:
    """Test that the updater returns a new record."""
    record = make_record(attempts=1, correct_attempts=1, streak_count=1, retention_level=1)

    updated = updater.record_attempt(record, True, 3, now=now)

    assert updated is not record
    assert record.attempts == 1
    assert record.retention_level == 1


def test_negative_time_rejected(updater: ProgressUpdater, make_record, now) -> None:
    """Test that negative study time is rejected."""
    with pytest.raises(InvalidInputError):
        updater.record_attempt(make_record(), True, -1, now=now)


@pytest.mark.parametrize("seconds", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_time_rejected(updater: ProgressUpdater, make_record, now, seconds: float) -> None:
    """Test that NaN or infinite study time is rejected."""
    with pytest.raises(InvalidInputError):
        updater.record_attempt(make_record(total_study_time_seconds=4.0), True, seconds, now=now)


def test_alternate_ladder(make_record, now, today) -> None:
    """Test the updater with a custom ladder."""
    custom = Settings()
    custom.ladder.intervals = [2, 5]
    updater = ProgressUpdater(custom)

    record = updater.record_attempt(make_record(retention_level=1), True, 1, now=now)

    assert record.retention_level == 1
    assert record.next_review_date == today + timedelta(days=5)
