"""Domain data structures for vocabulary progress and review planning."""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class LearningPhase(Enum):
    """Learning stages a word moves through, in order."""
    RECOGNITION = "RECOGNITION"
    UNDERSTANDING = "UNDERSTANDING"
    APPLICATION = "APPLICATION"
    MASTERY = "MASTERY"


class PracticeType(Enum):
    """Kinds of practice exercise a learner can attempt."""
    RECOGNITION = "recognition"
    TRANSLATION = "translation"
    SPELLING = "spelling"
    LISTENING = "listening"
    CONTEXT = "context"


class BatchAction(Enum):
    """Review state changes a learner can apply to several words at once."""
    MARK_COMPLETED = "mark_completed"  # Reviewed outside a practice session
    POSTPONE = "postpone"  # Push the review back by one day
    RESET = "reset"  # Start the interval ladder over


class ReviewStatus(Enum):
    """Display status of a scheduled review."""
    OVERDUE = "overdue"
    TODAY = "today"
    PENDING = "pending"


@dataclass(frozen=True)
class VocabularyItem:
    """A vocabulary word as seen by the engine. Read-only."""
    id: str
    word: str
    difficulty: int
    definition: Optional[str] = None
    year_level: Optional[int] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class ProgressRecord:
    """A learner's progress with one vocabulary word."""
    learner_id: str
    item_id: str
    next_review_date: date
    phase: LearningPhase = LearningPhase.RECOGNITION
    mastery_level: int = 0
    attempts: int = 0
    correct_attempts: int = 0
    streak_count: int = 0
    retention_level: int = 0
    review_interval: int = 1
    last_seen_at: Optional[datetime] = None
    last_correct_at: Optional[datetime] = None
    total_study_time_seconds: float = 0.0
    needs_review: bool = False
    is_memorized: bool = False
    id: Optional[int] = None
    version: int = 0


@dataclass
class AttemptResult:
    """Outcome of recording one practice attempt."""
    progress: ProgressRecord
    phase_advanced: bool
    mastery_improved: bool


@dataclass
class AuditEvent:
    """An append-only activity log entry."""
    learner_id: str
    action: str
    details: Dict[str, Any]
    resource_type: Optional[str] = None
    resource_id: Optional[int] = None


@dataclass
class ProgressFilter:
    """Optional criteria for loading a learner's progress records."""
    phase: Optional[LearningPhase] = None
    needs_review: Optional[bool] = None
    is_memorized: Optional[bool] = None
    item_ids: Optional[List[str]] = None
    due_on_or_before: Optional[date] = None
    due_on_or_after: Optional[date] = None


@dataclass
class ScheduledItem:
    """A progress record placed in the review plan."""
    progress: ProgressRecord
    item: VocabularyItem
    priority: float
    status: ReviewStatus = ReviewStatus.PENDING

    @property
    def is_overdue(self) -> bool:
        return self.status is ReviewStatus.OVERDUE

    @property
    def date_key(self) -> str:
        return self.progress.next_review_date.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        progress = self.progress
        return {
            "item_id": progress.item_id,
            "word": self.item.word,
            "definition": self.item.definition,
            "difficulty": self.item.difficulty,
            "phase": progress.phase.value,
            "mastery_level": progress.mastery_level,
            "streak_count": progress.streak_count,
            "retention_level": progress.retention_level,
            "next_review_date": self.date_key,
            "needs_review": progress.needs_review,
            "priority": self.priority,
            "status": self.status.value,
            "is_overdue": self.is_overdue,
        }


@dataclass
class ReviewStatistics:
    """Summary counts over a review plan."""
    total_review_words: int = 0
    overdue_words: int = 0
    today_words: int = 0
    upcoming_words: int = 0
    difficulty_distribution: Dict[int, int] = field(default_factory=dict)
    phase_distribution: Dict[str, int] = field(default_factory=dict)
    mastery_distribution: Dict[str, int] = field(
        default_factory=lambda: {"low": 0, "medium": 0, "high": 0}
    )


@dataclass
class DateRange:
    """Inclusive window a review plan covers."""
    start: date
    end: date
    days: int


@dataclass
class ReviewSchedule:
    """A learner's review plan: items by date, statistics and advice."""
    schedule: Dict[str, List[ScheduledItem]]
    statistics: ReviewStatistics
    recommendations: List[str]
    date_range: DateRange

    def to_dict(self) -> Dict[str, Any]:
        """Return plain data suitable for JSON encoding."""
        stats = self.statistics
        return {
            "schedule": {
                date_key: [item.to_dict() for item in items]
                for date_key, items in self.schedule.items()
            },
            "statistics": {
                "total_review_words": stats.total_review_words,
                "overdue_words": stats.overdue_words,
                "today_words": stats.today_words,
                "upcoming_words": stats.upcoming_words,
                "difficulty_distribution": dict(stats.difficulty_distribution),
                "phase_distribution": dict(stats.phase_distribution),
                "mastery_distribution": dict(stats.mastery_distribution),
            },
            "recommendations": list(self.recommendations),
            "date_range": {
                "start": self.date_range.start.isoformat(),
                "end": self.date_range.end.isoformat(),
                "days": self.date_range.days,
            },
        }


@dataclass
class ProgressSummary:
    """Aggregate counts over all of a learner's progress records."""
    phase_distribution: Dict[str, int] = field(default_factory=dict)
    memorized_count: int = 0
    average_mastery: float = 0.0
    today_reviews: int = 0
    tomorrow_reviews: int = 0


@dataclass
class ProgressOverview:
    """A page of progress records with summary statistics."""
    progress: List[ProgressRecord]
    page: int
    limit: int
    total: int
    phase_distribution: Dict[str, int]
    memorized_count: int
    average_mastery: float
    today_reviews: int
    tomorrow_reviews: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
