"""Storage for progress records, vocabulary words and the activity log."""
import logging
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from vocabreview.errors import AuditWriteFailure, ConflictError, NotFoundError
from vocabreview.models.models import ActivityLog, VocabularyProgress, VocabularyWord
from vocabreview.models.progress_models import (
    AuditEvent,
    ProgressFilter,
    ProgressRecord,
    ProgressSummary,
    VocabularyItem,
)

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Durable storage the review engine reads from and writes to."""

    @abstractmethod
    def load_progress(self, learner_id: str, item_id: str) -> ProgressRecord:
        """Load one progress record. Raises NotFoundError if absent."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def load_all_progress(
        self,
        learner_id: str,
        filters: Optional[ProgressFilter] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ProgressRecord]:
        """Load a learner's progress records matching the filters.

        Records come back by next review date, most recently seen first on
        the same date.
        """
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def count_progress(self, learner_id: str, filters: Optional[ProgressFilter] = None) -> int:
        """Count a learner's progress records matching the filters."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def summarize_progress(self, learner_id: str, today: date) -> ProgressSummary:
        """Aggregate phase, memorized, mastery and due counts for a learner."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def load_item(self, item_id: str) -> VocabularyItem:
        """Load one vocabulary word. Raises NotFoundError if absent."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def load_items(self, item_ids: Iterable[str]) -> Dict[str, VocabularyItem]:
        """Load vocabulary words by id. Missing ids are left out."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save_progress(self, record: ProgressRecord) -> ProgressRecord:
        """Insert or update a record. Raises ConflictError on a lost update."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def append_audit_event(self, event: AuditEvent) -> None:
        """Append an activity log entry. Raises AuditWriteFailure."""
        raise NotImplementedError("Subclasses must implement this method")


def _to_item(word: VocabularyWord) -> VocabularyItem:
    return VocabularyItem(
        id=word.id,
        word=word.word,
        difficulty=word.difficulty,
        definition=word.definition,
        year_level=word.year_level,
        category=word.category,
    )


def _to_record(row: VocabularyProgress) -> ProgressRecord:
    return ProgressRecord(
        id=row.id,
        version=row.version_id,
        learner_id=row.learner_id,
        item_id=row.word_id,
        phase=row.phase,
        mastery_level=row.mastery_level,
        attempts=row.attempts,
        correct_attempts=row.correct_attempts,
        streak_count=row.streak_count,
        retention_level=row.retention_level,
        review_interval=row.review_interval,
        next_review_date=row.next_review_date,
        last_seen_at=row.last_seen_at,
        last_correct_at=row.last_correct_at,
        total_study_time_seconds=row.total_study_time,
        needs_review=row.needs_review,
        is_memorized=row.is_memorized,
    )


def _copy_to_row(record: ProgressRecord, row: VocabularyProgress) -> None:
    row.phase = record.phase
    row.mastery_level = record.mastery_level
    row.attempts = record.attempts
    row.correct_attempts = record.correct_attempts
    row.streak_count = record.streak_count
    row.retention_level = record.retention_level
    row.review_interval = record.review_interval
    row.next_review_date = record.next_review_date
    row.last_seen_at = record.last_seen_at
    row.last_correct_at = record.last_correct_at
    row.total_study_time = record.total_study_time_seconds
    row.needs_review = record.needs_review
    row.is_memorized = record.is_memorized


class SqlAlchemyProgressStore(ProgressStore):
    """Progress store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def load_progress(self, learner_id: str, item_id: str) -> ProgressRecord:
        row = (
            self.db.query(VocabularyProgress)
            .filter(
                and_(
                    VocabularyProgress.learner_id == learner_id,
                    VocabularyProgress.word_id == item_id,
                )
            )
            .first()
        )
        if not row:
            raise NotFoundError(f"No progress for word {item_id} (learner {learner_id})")
        return _to_record(row)

    def _progress_query(self, learner_id: str, filters: Optional[ProgressFilter] = None):
        query = self.db.query(VocabularyProgress).filter(
            VocabularyProgress.learner_id == learner_id
        )

        if filters is not None:
            if filters.phase is not None:
                query = query.filter(VocabularyProgress.phase == filters.phase)
            if filters.needs_review is not None:
                query = query.filter(VocabularyProgress.needs_review == filters.needs_review)
            if filters.is_memorized is not None:
                query = query.filter(VocabularyProgress.is_memorized == filters.is_memorized)
            if filters.item_ids is not None:
                query = query.filter(VocabularyProgress.word_id.in_(filters.item_ids))
            if filters.due_on_or_before is not None:
                query = query.filter(VocabularyProgress.next_review_date <= filters.due_on_or_before)
            if filters.due_on_or_after is not None:
                query = query.filter(VocabularyProgress.next_review_date >= filters.due_on_or_after)

        return query

    def load_all_progress(
        self,
        learner_id: str,
        filters: Optional[ProgressFilter] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[ProgressRecord]:
        query = self._progress_query(learner_id, filters).order_by(
            VocabularyProgress.next_review_date,
            VocabularyProgress.last_seen_at.desc().nulls_last(),
            VocabularyProgress.id,
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [_to_record(row) for row in query.all()]

    def count_progress(self, learner_id: str, filters: Optional[ProgressFilter] = None) -> int:
        return self._progress_query(learner_id, filters).count()

    def summarize_progress(self, learner_id: str, today: date) -> ProgressSummary:
        tomorrow = today + timedelta(days=1)
        phase_counts = (
            self.db.query(VocabularyProgress.phase, func.count(VocabularyProgress.id))
            .filter(VocabularyProgress.learner_id == learner_id)
            .group_by(VocabularyProgress.phase)
            .all()
        )
        memorized_count, average_mastery, today_reviews, tomorrow_reviews = (
            self.db.query(
                func.count(case((VocabularyProgress.is_memorized.is_(True), 1))),
                func.avg(VocabularyProgress.mastery_level),
                func.count(case((VocabularyProgress.next_review_date <= today, 1))),
                func.count(case((VocabularyProgress.next_review_date == tomorrow, 1))),
            )
            .filter(VocabularyProgress.learner_id == learner_id)
            .one()
        )
        return ProgressSummary(
            phase_distribution=dict(sorted((phase.value, count) for phase, count in phase_counts)),
            memorized_count=memorized_count,
            average_mastery=float(average_mastery or 0),
            today_reviews=today_reviews,
            tomorrow_reviews=tomorrow_reviews,
        )

    def load_item(self, item_id: str) -> VocabularyItem:
        word = self.db.query(VocabularyWord).filter(VocabularyWord.id == item_id).first()
        if not word:
            raise NotFoundError(f"Word {item_id} not found")
        return _to_item(word)

    def load_items(self, item_ids: Iterable[str]) -> Dict[str, VocabularyItem]:
        item_ids = list(set(item_ids))
        if not item_ids:
            return {}
        words = self.db.query(VocabularyWord).filter(VocabularyWord.id.in_(item_ids)).all()
        return {word.id: _to_item(word) for word in words}

    def save_progress(self, record: ProgressRecord) -> ProgressRecord:
        if record.id is None:
            row = VocabularyProgress(learner_id=record.learner_id, word_id=record.item_id)
            self.db.add(row)
        else:
            row = self.db.get(VocabularyProgress, record.id)
            if row is None:
                raise NotFoundError(f"Progress {record.id} not found")
            if row.version_id != record.version:
                raise ConflictError(
                    f"Progress {record.id} changed (version {row.version_id}, "
                    f"expected {record.version})"
                )

        _copy_to_row(record, row)
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise ConflictError(
                f"Concurrent update of word {record.item_id} (learner {record.learner_id})"
            ) from e
        except IntegrityError as e:
            self.db.rollback()
            # Only a lost race on the first insert for the pair is a conflict
            if record.id is None and self._progress_exists(record.learner_id, record.item_id):
                raise ConflictError(
                    f"Progress for word {record.item_id} (learner {record.learner_id}) already exists"
                ) from e
            raise

        self.db.refresh(row)
        return _to_record(row)

    def _progress_exists(self, learner_id: str, item_id: str) -> bool:
        return (
            self.db.query(VocabularyProgress.id)
            .filter(
                VocabularyProgress.learner_id == learner_id,
                VocabularyProgress.word_id == item_id,
            )
            .first()
            is not None
        )

    def append_audit_event(self, event: AuditEvent) -> None:
        log = ActivityLog(
            learner_id=event.learner_id,
            action=event.action,
            details=event.details,
            resource_type=event.resource_type,
            resource_id=event.resource_id,
        )
        try:
            self.db.add(log)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AuditWriteFailure(f"Could not write {event.action} event: {e}") from e
