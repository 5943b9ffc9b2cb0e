"""Learning phase progression."""
from typing import Optional, Union

from vocabreview.config import PhaseSettings, settings
from vocabreview.errors import InvalidInputError
from vocabreview.models.progress_models import LearningPhase

PHASE_ORDER = [
    LearningPhase.RECOGNITION,
    LearningPhase.UNDERSTANDING,
    LearningPhase.APPLICATION,
    LearningPhase.MASTERY,
]


def parse_phase(value: Union[LearningPhase, str]) -> LearningPhase:
    """Convert a phase name into a LearningPhase."""
    if isinstance(value, LearningPhase):
        return value
    try:
        return LearningPhase(str(value).upper())
    except ValueError:
        raise InvalidInputError(f"Unknown learning phase: {value!r}") from None


def following_phase(phase: LearningPhase) -> LearningPhase:
    """Get the phase after the given one. MASTERY is terminal."""
    index = PHASE_ORDER.index(phase)
    return PHASE_ORDER[min(index + 1, len(PHASE_ORDER) - 1)]


def should_advance(
    mastery_level: int,
    streak_count: int,
    config: Optional[PhaseSettings] = None,
) -> bool:
    """Check whether the automatic advance rule fires."""
    config = config or settings.phase
    return (
        mastery_level >= config.advance_mastery_threshold
        and streak_count >= config.advance_streak_threshold
    )


def next_phase(
    current: LearningPhase,
    mastery_level: int,
    streak_count: int,
    explicit_phase: Optional[Union[LearningPhase, str]] = None,
    config: Optional[PhaseSettings] = None,
) -> LearningPhase:
    """Determine the phase after an attempt.

    An explicit phase wins for this update. Otherwise the phase moves at
    most one step forward and never back.
    """
    if explicit_phase is not None:
        return parse_phase(explicit_phase)

    if should_advance(mastery_level, streak_count, config):
        return following_phase(current)
    return current
