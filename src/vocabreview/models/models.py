"""Database models for vocabulary progress."""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vocabreview.models.base import Base, TimestampMixin
from vocabreview.models.progress_models import LearningPhase


class VocabularyWord(Base, TimestampMixin):
    """Vocabulary word model."""

    __tablename__ = "vocabulary_words"

    id = Column(String, primary_key=True)
    word = Column(String, nullable=False)
    definition = Column(String)
    difficulty = Column(Integer, nullable=False, default=1)  # 1-5
    year_level = Column(Integer)
    category = Column(String)

    # Relationships
    progress = relationship("VocabularyProgress", back_populates="word")


class VocabularyProgress(Base, TimestampMixin):
    """Learner-word progress model."""

    __tablename__ = "vocabulary_progress"
    __table_args__ = (UniqueConstraint("learner_id", "word_id"),)

    id = Column(Integer, primary_key=True)
    learner_id = Column(String, nullable=False, index=True)
    word_id = Column(String, ForeignKey("vocabulary_words.id"), nullable=False)
    phase = Column(Enum(LearningPhase), nullable=False, default=LearningPhase.RECOGNITION)
    mastery_level = Column(Integer, nullable=False, default=0)  # 0-100
    attempts = Column(Integer, nullable=False, default=0)
    correct_attempts = Column(Integer, nullable=False, default=0)
    streak_count = Column(Integer, nullable=False, default=0)
    retention_level = Column(Integer, nullable=False, default=0)  # interval ladder index
    review_interval = Column(Integer, nullable=False, default=1)  # in days
    next_review_date = Column(Date, nullable=False, index=True)
    last_seen_at = Column(DateTime(timezone=True))
    last_correct_at = Column(DateTime(timezone=True))
    total_study_time = Column(Float, nullable=False, default=0.0)  # in seconds
    needs_review = Column(Boolean, nullable=False, default=False)
    is_memorized = Column(Boolean, nullable=False, default=False)
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    # Relationships
    word = relationship("VocabularyWord", back_populates="progress")


class ActivityLog(Base, TimestampMixin):
    """Learner activity log model."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    learner_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)  # e.g. VOCABULARY_STUDY
    details = Column(JSON, nullable=False)
    resource_type = Column(String)
    resource_id = Column(Integer)
