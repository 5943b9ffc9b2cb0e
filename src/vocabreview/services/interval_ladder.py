"""Graduated review intervals indexed by retention level."""
from typing import List, Optional, Sequence

from vocabreview.config import settings


class IntervalLadder:
    """Fixed table of review intervals in days.

    Level 0 is the shortest gap. Out-of-range levels are clamped, so every
    lookup returns a value.
    """

    def __init__(self, intervals: Optional[Sequence[int]] = None):
        """Initialize the ladder with the given or configured intervals."""
        self.intervals: List[int] = list(
            intervals if intervals is not None else settings.ladder.intervals
        )
        if not self.intervals:
            raise ValueError("Interval ladder must have at least one level")

    def __len__(self) -> int:
        return len(self.intervals)

    @property
    def max_level(self) -> int:
        """Highest valid retention level."""
        return len(self.intervals) - 1

    def clamp(self, level: int) -> int:
        """Clamp a level into the ladder bounds."""
        return max(0, min(level, self.max_level))

    def interval_for_level(self, level: int) -> int:
        """Get the review interval in days for a retention level."""
        return self.intervals[self.clamp(level)]

    def promote(self, level: int) -> int:
        """Move one level up after a correct answer."""
        return min(level + 1, self.max_level)

    def demote(self, level: int) -> int:
        """Move one level down after a mistake."""
        return max(level - 1, 0)


def interval_for_level(level: int, intervals: Optional[Sequence[int]] = None) -> int:
    """Get the review interval in days for a retention level."""
    return IntervalLadder(intervals).interval_for_level(level)
