"""Select due reviews and rank them by urgency."""
import logging
from datetime import UTC, date, datetime
from typing import Iterable, List, Mapping, Optional

from vocabreview.config import PrioritySettings, settings
from vocabreview.models.progress_models import (
    ProgressRecord,
    ReviewStatus,
    ScheduledItem,
    VocabularyItem,
)

logger = logging.getLogger(__name__)


def review_status(next_review_date: date, today: date) -> ReviewStatus:
    """Get the display status of a review date relative to today."""
    if next_review_date < today:
        return ReviewStatus.OVERDUE
    if next_review_date == today:
        return ReviewStatus.TODAY
    return ReviewStatus.PENDING


def is_due(
    record: ProgressRecord,
    window_start: date,
    window_end: date,
    include_overdue: bool = False,
    today: Optional[date] = None,
) -> bool:
    """Check whether a record falls inside the review window.

    With ``include_overdue`` records due before ``today`` are selected even
    when they fall before ``window_start``.
    """
    if record.next_review_date > window_end:
        return False
    if record.next_review_date >= window_start:
        return True
    today = today or datetime.now(UTC).date()
    return include_overdue and record.next_review_date < today


class ReviewPrioritizer:
    """Ranks a learner's due progress records."""

    def __init__(self, config: Optional[PrioritySettings] = None):
        """Initialize the prioritizer with priority weights."""
        self.config = config or settings.priority

    def calculate_priority(self, record: ProgressRecord, difficulty: int, today: date) -> float:
        """Calculate the urgency score of a review. Higher is more urgent."""
        config = self.config
        priority = 0.0

        # Each day overdue adds weight
        days_overdue = (today - record.next_review_date).days
        if days_overdue > 0:
            priority += days_overdue * config.overdue_day_weight

        priority += (100 - record.mastery_level) * config.mastery_gap_weight

        # Last answer was wrong
        if record.streak_count == 0 and record.attempts > 0:
            priority += config.lapse_bonus

        priority += difficulty * config.difficulty_weight
        priority += config.phase_weights.get(record.phase.value, 0)
        return priority

    def select_due(
        self,
        records: Iterable[ProgressRecord],
        items: Mapping[str, VocabularyItem],
        window_start: date,
        window_end: date,
        include_overdue: bool = False,
        today: Optional[date] = None,
    ) -> List[ScheduledItem]:
        """Select the records due in the window, most urgent first.

        Records whose vocabulary item is missing from ``items`` are skipped.
        """
        today = today or datetime.now(UTC).date()
        selected = []
        for record in records:
            if not is_due(record, window_start, window_end, include_overdue, today):
                continue

            item = items.get(record.item_id)
            if item is None:
                logger.warning(
                    "Skipping progress for missing word %s (learner %s)",
                    record.item_id,
                    record.learner_id,
                )
                continue

            selected.append(
                ScheduledItem(
                    progress=record,
                    item=item,
                    priority=self.calculate_priority(record, item.difficulty, today),
                    status=review_status(record.next_review_date, today),
                )
            )

        selected.sort(key=self._sort_key)
        return selected

    @staticmethod
    def _sort_key(scheduled: ScheduledItem):
        progress = scheduled.progress
        return (
            -scheduled.priority,
            progress.next_review_date,
            progress.mastery_level,
            progress.streak_count,
            progress.item_id,
        )
