"""Configuration settings for the review engine."""
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Learning settings
INTERVAL_LADDER = [1, 3, 7, 15, 30, 60, 120]  # days between reviews, per retention level
PHASE_WEIGHTS = {
    "RECOGNITION": 15,
    "UNDERSTANDING": 10,
    "APPLICATION": 5,
    "MASTERY": 0,
}


def get_interval_ladder() -> List[int]:
    """Get the interval ladder from environment variable."""
    raw = os.getenv("LADDER_INTERVALS", "")
    if not raw:
        return list(INTERVAL_LADDER)
    return [int(days) for days in raw.split(",") if days.strip()]


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabreview.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LadderSettings:
    """Interval ladder settings."""
    intervals: List[int] = field(default_factory=get_interval_ladder)


@dataclass
class MasterySettings:
    """Mastery estimation settings."""
    accuracy_weight: float = float(os.getenv("MASTERY_ACCURACY_WEIGHT", "70"))
    streak_bonus_per_answer: int = int(os.getenv("MASTERY_STREAK_BONUS", "5"))
    streak_bonus_cap: int = int(os.getenv("MASTERY_STREAK_BONUS_CAP", "30"))
    memorized_threshold: int = int(os.getenv("MEMORIZED_THRESHOLD", "90"))
    needs_review_threshold: int = int(os.getenv("NEEDS_REVIEW_THRESHOLD", "60"))


@dataclass
class PhaseSettings:
    """Phase progression settings."""
    advance_mastery_threshold: int = int(os.getenv("PHASE_ADVANCE_MASTERY", "80"))
    advance_streak_threshold: int = int(os.getenv("PHASE_ADVANCE_STREAK", "3"))


@dataclass
class PrioritySettings:
    """Review priority weights."""
    overdue_day_weight: float = float(os.getenv("PRIORITY_OVERDUE_WEIGHT", "10"))
    mastery_gap_weight: float = float(os.getenv("PRIORITY_MASTERY_WEIGHT", "0.5"))
    lapse_bonus: float = float(os.getenv("PRIORITY_LAPSE_BONUS", "20"))
    difficulty_weight: float = float(os.getenv("PRIORITY_DIFFICULTY_WEIGHT", "3"))
    phase_weights: Dict[str, float] = field(default_factory=lambda: dict(PHASE_WEIGHTS))


@dataclass
class RecommendationSettings:
    """Thresholds for review plan recommendations."""
    overdue_threshold: int = int(os.getenv("RECOMMEND_OVERDUE_THRESHOLD", "10"))
    due_today_threshold: int = int(os.getenv("RECOMMEND_TODAY_THRESHOLD", "20"))
    low_mastery_threshold: int = int(os.getenv("RECOMMEND_LOW_MASTERY_THRESHOLD", "5"))
    recognition_threshold: int = int(os.getenv("RECOMMEND_RECOGNITION_THRESHOLD", "10"))
    min_review_words: int = int(os.getenv("RECOMMEND_MIN_REVIEW_WORDS", "5"))
    low_mastery_ceiling: int = 30
    high_mastery_floor: int = 70


@dataclass
class ScheduleSettings:
    """Review schedule settings."""
    default_days: int = int(os.getenv("SCHEDULE_DEFAULT_DAYS", "7"))
    default_page_size: int = int(os.getenv("PROGRESS_PAGE_SIZE", "20"))
    postpone_days: int = 1


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_ladder_settings() -> LadderSettings:
    """Get interval ladder settings."""
    return LadderSettings()


def get_mastery_settings() -> MasterySettings:
    """Get mastery settings."""
    return MasterySettings()


def get_phase_settings() -> PhaseSettings:
    """Get phase settings."""
    return PhaseSettings()


def get_priority_settings() -> PrioritySettings:
    """Get priority settings."""
    return PrioritySettings()


def get_recommendation_settings() -> RecommendationSettings:
    """Get recommendation settings."""
    return RecommendationSettings()


def get_schedule_settings() -> ScheduleSettings:
    """Get schedule settings."""
    return ScheduleSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    ladder: LadderSettings = field(default_factory=get_ladder_settings)
    mastery: MasterySettings = field(default_factory=get_mastery_settings)
    phase: PhaseSettings = field(default_factory=get_phase_settings)
    priority: PrioritySettings = field(default_factory=get_priority_settings)
    recommendation: RecommendationSettings = field(default_factory=get_recommendation_settings)
    schedule: ScheduleSettings = field(default_factory=get_schedule_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        intervals = self.ladder.intervals
        if not intervals:
            raise ValueError("LADDER_INTERVALS must not be empty")

        if any(days <= 0 for days in intervals):
            raise ValueError("LADDER_INTERVALS must all be positive")

        if any(later <= earlier for earlier, later in zip(intervals, intervals[1:])):
            raise ValueError("LADDER_INTERVALS must be strictly increasing")

        if self.mastery.accuracy_weight < 0 or self.mastery.streak_bonus_cap < 0:
            raise ValueError("Mastery weights cannot be negative")

        if not 0 <= self.mastery.memorized_threshold <= 100:
            raise ValueError("MEMORIZED_THRESHOLD must be between 0 and 100")

        if not 0 <= self.phase.advance_mastery_threshold <= 100:
            raise ValueError("PHASE_ADVANCE_MASTERY must be between 0 and 100")

        if self.phase.advance_streak_threshold < 0:
            raise ValueError("PHASE_ADVANCE_STREAK cannot be negative")

        missing = set(PHASE_WEIGHTS) - set(self.priority.phase_weights)
        if missing:
            raise ValueError(f"Missing phase weights for: {', '.join(sorted(missing))}")

        if self.recommendation.low_mastery_ceiling > self.recommendation.high_mastery_floor:
            raise ValueError("Low mastery ceiling cannot exceed high mastery floor")

        if self.schedule.default_days < 0:
            raise ValueError("SCHEDULE_DEFAULT_DAYS cannot be negative")

        if self.schedule.default_page_size < 1:
            raise ValueError("PROGRESS_PAGE_SIZE must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
