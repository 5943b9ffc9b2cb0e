"""Test configuration."""
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Generator

import pytest
from dotenv import load_dotenv
from faker import Faker
from sqlalchemy.orm import Session

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from vocabreview.config import DatabaseSettings, Settings
from vocabreview.models.base import init_db, make_engine, make_session_factory
from vocabreview.models.models import VocabularyWord
from vocabreview.models.progress_models import ProgressRecord

fake = Faker()

NOW = datetime(2024, 3, 15, 9, 30, tzinfo=UTC)
TODAY = NOW.date()


@pytest.fixture
def now() -> datetime:
    """Fixed current time for tests."""
    return NOW


@pytest.fixture
def today():
    """Fixed current date for tests."""
    return TODAY


@pytest.fixture
def test_settings() -> Settings:
    """Create settings with default engine constants."""
    test_settings = Settings()
    test_settings.validate()
    return test_settings


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = make_engine(DatabaseSettings(url="sqlite://", echo=False))
    init_db(engine)
    db = make_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def make_word(db: Session) -> Callable[..., VocabularyWord]:
    """Create vocabulary words in the test database."""
    def _make_word(difficulty: int = 3, **kwargs) -> VocabularyWord:
        word = VocabularyWord(
            id=kwargs.pop("id", fake.uuid4()),
            word=kwargs.pop("word", fake.word()),
            definition=kwargs.pop("definition", fake.sentence()),
            difficulty=difficulty,
            year_level=kwargs.pop("year_level", 7),
            category=kwargs.pop("category", "general"),
            **kwargs,
        )
        db.add(word)
        db.commit()
        db.refresh(word)
        return word

    return _make_word


@pytest.fixture
def make_record() -> Callable[..., ProgressRecord]:
    """Build progress records for a single learner."""
    learner_id = fake.uuid4()

    def _make_record(**kwargs) -> ProgressRecord:
        kwargs.setdefault("learner_id", learner_id)
        kwargs.setdefault("item_id", fake.uuid4())
        kwargs.setdefault("next_review_date", TODAY)
        return ProgressRecord(**kwargs)

    return _make_record
