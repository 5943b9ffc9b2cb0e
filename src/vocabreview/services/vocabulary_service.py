"""Service exposing the review engine to the surrounding application."""
import logging
import math
import time
from datetime import UTC, date, datetime, timedelta
from typing import Callable, List, Optional, Union

from vocabreview import monitoring
from vocabreview.config import Settings, settings as default_settings
from vocabreview.errors import AuditWriteFailure, ConflictError, InvalidInputError, NotFoundError
from vocabreview.models.progress_models import (
    AttemptResult,
    AuditEvent,
    BatchAction,
    DateRange,
    LearningPhase,
    PracticeType,
    ProgressFilter,
    ProgressOverview,
    ProgressRecord,
    ReviewSchedule,
)
from vocabreview.services import schedule_aggregator
from vocabreview.services.phase_machine import parse_phase
from vocabreview.services.progress_store import ProgressStore
from vocabreview.services.progress_updater import ProgressUpdater
from vocabreview.services.review_prioritizer import ReviewPrioritizer

logger = logging.getLogger(__name__)

STUDY_ACTION = "VOCABULARY_STUDY"


def _require_id(value: str, name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{name} is required")
    return value


def _parse_practice_type(value: Optional[Union[PracticeType, str]]) -> Optional[PracticeType]:
    if value is None or isinstance(value, PracticeType):
        return value
    try:
        return PracticeType(str(value).lower())
    except ValueError:
        raise InvalidInputError(f"Unknown practice type: {value!r}") from None


def _parse_action(value: Union[BatchAction, str]) -> BatchAction:
    if isinstance(value, BatchAction):
        return value
    try:
        return BatchAction(str(value).lower())
    except ValueError:
        raise InvalidInputError(f"Unknown batch action: {value!r}") from None


class VocabularyService:
    """Records practice attempts and builds review plans for learners."""

    def __init__(
        self,
        store: ProgressStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the service with a progress store, settings and clock."""
        self.store = store
        self.settings = settings or default_settings
        self.clock = clock or (lambda: datetime.now(UTC))
        self.updater = ProgressUpdater(self.settings)
        self.prioritizer = ReviewPrioritizer(self.settings.priority)

    def record_attempt(
        self,
        learner_id: str,
        item_id: str,
        is_correct: bool,
        time_spent_seconds: float = 0,
        explicit_phase: Optional[Union[LearningPhase, str]] = None,
        practice_type: Optional[Union[PracticeType, str]] = None,
    ) -> AttemptResult:
        """Record one practice attempt and reschedule the word."""
        started = time.perf_counter()

        # Validate everything before touching storage
        _require_id(learner_id, "learner_id")
        _require_id(item_id, "item_id")
        if time_spent_seconds is None:
            time_spent_seconds = 0
        if not math.isfinite(time_spent_seconds) or time_spent_seconds < 0:
            raise InvalidInputError(f"time_spent_seconds must be a non-negative number: {time_spent_seconds}")
        if explicit_phase is not None:
            explicit_phase = parse_phase(explicit_phase)
        practice_type = _parse_practice_type(practice_type)

        item = self.store.load_item(item_id)
        now = self.clock()

        try:
            previous = self.store.load_progress(learner_id, item_id)
        except NotFoundError:
            logger.info(f"Creating progress for word {item_id} (learner {learner_id})")
            previous = self.updater.new_record(learner_id, item_id, now.date())

        updated = self.updater.record_attempt(
            previous,
            is_correct,
            time_spent_seconds,
            explicit_phase=explicit_phase,
            now=now,
        )

        try:
            saved = self.store.save_progress(updated)
        except ConflictError:
            monitoring.save_conflicts.inc()
            logger.warning(f"Conflict saving word {item_id} for learner {learner_id}")
            raise

        monitoring.attempts_recorded.labels(result="correct" if is_correct else "incorrect").inc()
        phase_advanced = saved.phase is not previous.phase
        if phase_advanced:
            monitoring.phase_advances.labels(phase=saved.phase.value).inc()
            logger.info(
                f"Learner {learner_id} moved word {item.word!r} "
                f"from {previous.phase.value} to {saved.phase.value}"
            )

        self._audit(
            AuditEvent(
                learner_id=learner_id,
                action=STUDY_ACTION,
                details={
                    "word_id": item_id,
                    "word": item.word,
                    "is_correct": is_correct,
                    "phase": saved.phase.value,
                    "mastery_level": saved.mastery_level,
                    "practice_type": practice_type.value if practice_type else None,
                },
                resource_type="VocabularyProgress",
                resource_id=saved.id,
            )
        )

        logger.info(
            f"Recorded {'correct' if is_correct else 'incorrect'} attempt on word {item_id} "
            f"for learner {learner_id}: mastery {saved.mastery_level}, next review {saved.next_review_date}"
        )
        monitoring.operation_duration.labels(operation="record_attempt").observe(
            time.perf_counter() - started
        )
        return AttemptResult(
            progress=saved,
            phase_advanced=phase_advanced,
            mastery_improved=saved.mastery_level > previous.mastery_level,
        )

    def get_review_schedule(
        self,
        learner_id: str,
        from_date: Optional[date] = None,
        days: Optional[int] = None,
        include_overdue: bool = False,
    ) -> ReviewSchedule:
        """Build the learner's review plan for a window of days."""
        started = time.perf_counter()
        _require_id(learner_id, "learner_id")
        days = self.settings.schedule.default_days if days is None else days
        if days < 0:
            raise InvalidInputError(f"days cannot be negative: {days}")

        today = self.clock().date()
        window_start = from_date or today
        window_end = window_start + timedelta(days=days)

        filters = ProgressFilter(due_on_or_before=window_end)
        if not include_overdue:
            filters.due_on_or_after = window_start
        records = self.store.load_all_progress(learner_id, filters)
        items = self.store.load_items(record.item_id for record in records)

        scheduled = self.prioritizer.select_due(
            records,
            items,
            window_start,
            window_end,
            include_overdue=include_overdue,
            today=today,
        )
        statistics = schedule_aggregator.compute_statistics(
            scheduled, today, self.settings.recommendation
        )
        recommendations = schedule_aggregator.generate_recommendations(
            statistics, self.settings.recommendation
        )

        monitoring.schedules_built.inc()
        monitoring.operation_duration.labels(operation="get_review_schedule").observe(
            time.perf_counter() - started
        )
        logger.info(
            f"Review schedule for learner {learner_id}: {statistics.total_review_words} words "
            f"({statistics.overdue_words} overdue, {statistics.today_words} today)"
        )
        return ReviewSchedule(
            schedule=schedule_aggregator.build_schedule(scheduled),
            statistics=statistics,
            recommendations=recommendations,
            date_range=DateRange(start=window_start, end=window_end, days=days),
        )

    def apply_batch_action(
        self,
        learner_id: str,
        item_ids: List[str],
        action: Union[BatchAction, str],
    ) -> int:
        """Apply a review state change to several words at once."""
        _require_id(learner_id, "learner_id")
        if not item_ids:
            raise InvalidInputError("item_ids must not be empty")
        for item_id in item_ids:
            _require_id(item_id, "item_id")
        action = _parse_action(action)

        wanted = list(dict.fromkeys(item_ids))
        records = self.store.load_all_progress(learner_id, ProgressFilter(item_ids=wanted))
        found = {record.item_id for record in records}
        missing = [item_id for item_id in wanted if item_id not in found]
        if missing:
            raise NotFoundError(
                f"Words not in learner {learner_id}'s list: {', '.join(missing)}"
            )

        now = self.clock()
        today = now.date()
        updated_count = 0
        for record in records:
            updated = self._apply_action(record, action, now, today)
            try:
                self.store.save_progress(updated)
            except ConflictError:
                monitoring.save_conflicts.inc()
                logger.warning(f"Conflict applying {action.value} to word {record.item_id}")
                raise
            updated_count += 1

        monitoring.batch_actions.labels(action=action.value).inc(updated_count)
        logger.info(f"Applied {action.value} to {updated_count} words for learner {learner_id}")

        self._audit(
            AuditEvent(
                learner_id=learner_id,
                action=STUDY_ACTION,
                details={
                    "action": "batch_review_update",
                    "operation": action.value,
                    "word_count": len(wanted),
                    "word_ids": wanted,
                },
            )
        )
        return updated_count

    def get_progress_overview(
        self,
        learner_id: str,
        filters: Optional[ProgressFilter] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> ProgressOverview:
        """Get a page of the learner's progress with summary statistics."""
        _require_id(learner_id, "learner_id")
        limit = self.settings.schedule.default_page_size if limit is None else limit
        if page < 1 or limit < 1:
            raise InvalidInputError("page and limit must be positive")

        today = self.clock().date()
        total = self.store.count_progress(learner_id, filters)
        progress = self.store.load_all_progress(
            learner_id, filters, offset=(page - 1) * limit, limit=limit
        )

        # Summary statistics cover all of the learner's words
        summary = self.store.summarize_progress(learner_id, today)
        logger.info(f"Progress overview for learner {learner_id}: page {page}, {total} matching words")

        return ProgressOverview(
            progress=progress,
            page=page,
            limit=limit,
            total=total,
            phase_distribution=summary.phase_distribution,
            memorized_count=summary.memorized_count,
            average_mastery=summary.average_mastery,
            today_reviews=summary.today_reviews,
            tomorrow_reviews=summary.tomorrow_reviews,
        )

    def _apply_action(
        self, record: ProgressRecord, action: BatchAction, now: datetime, today: date
    ) -> ProgressRecord:
        if action is BatchAction.MARK_COMPLETED:
            return schedule_aggregator.mark_completed(record, now)
        if action is BatchAction.POSTPONE:
            return schedule_aggregator.postpone(
                record, today, self.settings.schedule.postpone_days
            )
        return schedule_aggregator.reset(
            record, today, self.updater.ladder.interval_for_level(0)
        )

    def _audit(self, event: AuditEvent) -> None:
        """Write an audit event without letting a failure reach the caller."""
        try:
            self.store.append_audit_event(event)
        except AuditWriteFailure as e:
            monitoring.audit_write_failures.inc()
            logger.warning(f"Audit event {event.action} for learner {event.learner_id} dropped: {e}")
