"""Apply practice attempt outcomes to progress records."""
import logging
import math
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Union

from vocabreview.config import Settings, settings as default_settings
from vocabreview.errors import InvalidInputError
from vocabreview.models.progress_models import LearningPhase, ProgressRecord
from vocabreview.services.interval_ladder import IntervalLadder
from vocabreview.services.mastery import estimate_mastery
from vocabreview.services.phase_machine import next_phase

logger = logging.getLogger(__name__)


class ProgressUpdater:
    """Turns an old progress record and an attempt outcome into a new record."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the updater with engine settings."""
        self.settings = settings or default_settings
        self.ladder = IntervalLadder(self.settings.ladder.intervals)

    def new_record(self, learner_id: str, item_id: str, today: date) -> ProgressRecord:
        """Create the initial record for a learner's first attempt at a word."""
        return ProgressRecord(
            learner_id=learner_id,
            item_id=item_id,
            next_review_date=today,
            phase=LearningPhase.RECOGNITION,
            mastery_level=0,
            retention_level=0,
            review_interval=self.ladder.interval_for_level(0),
        )

    def record_attempt(
        self,
        record: ProgressRecord,
        is_correct: bool,
        time_spent_seconds: float = 0,
        explicit_phase: Optional[Union[LearningPhase, str]] = None,
        now: Optional[datetime] = None,
    ) -> ProgressRecord:
        """Return the record as it stands after one practice attempt."""
        if time_spent_seconds is None:
            time_spent_seconds = 0
        if not math.isfinite(time_spent_seconds) or time_spent_seconds < 0:
            raise InvalidInputError(f"time_spent_seconds must be a non-negative number: {time_spent_seconds}")

        now = now or datetime.now(UTC)
        today = now.date()

        # Update counters
        attempts = record.attempts + 1
        correct_attempts = record.correct_attempts + (1 if is_correct else 0)
        streak_count = record.streak_count + 1 if is_correct else 0

        # Walk the interval ladder
        if is_correct:
            retention_level = self.ladder.promote(record.retention_level)
        else:
            retention_level = self.ladder.demote(record.retention_level)
        retention_level = self.ladder.clamp(retention_level)
        review_interval = self.ladder.interval_for_level(retention_level)

        mastery_level = estimate_mastery(
            correct_attempts, attempts, streak_count, self.settings.mastery
        )
        phase = next_phase(
            record.phase,
            mastery_level,
            streak_count,
            explicit_phase=explicit_phase,
            config=self.settings.phase,
        )

        updated = replace(
            record,
            attempts=attempts,
            correct_attempts=correct_attempts,
            streak_count=streak_count,
            total_study_time_seconds=record.total_study_time_seconds + time_spent_seconds,
            retention_level=retention_level,
            review_interval=review_interval,
            next_review_date=today + timedelta(days=review_interval),
            mastery_level=mastery_level,
            phase=phase,
            is_memorized=(
                phase is LearningPhase.MASTERY
                and mastery_level >= self.settings.mastery.memorized_threshold
            ),
            needs_review=(
                not is_correct
                or mastery_level < self.settings.mastery.needs_review_threshold
            ),
            last_seen_at=now,
            last_correct_at=now if is_correct else record.last_correct_at,
        )

        logger.debug(
            "Learner %s word %s: level %d -> %d, mastery %d -> %d, phase %s -> %s",
            record.learner_id,
            record.item_id,
            record.retention_level,
            retention_level,
            record.mastery_level,
            mastery_level,
            record.phase.value,
            phase.value,
        )
        return updated
