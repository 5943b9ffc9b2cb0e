"""Group review plans by date, summarize them and apply batch review actions."""
from collections import defaultdict
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from vocabreview.config import RecommendationSettings, settings
from vocabreview.models.progress_models import (
    LearningPhase,
    ProgressRecord,
    ReviewStatistics,
    ScheduledItem,
)


def build_schedule(items: List[ScheduledItem]) -> Dict[str, List[ScheduledItem]]:
    """Bucket prioritized items by review date, keeping their order."""
    buckets: Dict[str, List[ScheduledItem]] = defaultdict(list)
    for item in items:
        buckets[item.date_key].append(item)
    return {date_key: buckets[date_key] for date_key in sorted(buckets)}


def mastery_bucket(mastery_level: int, config: Optional[RecommendationSettings] = None) -> str:
    """Get the low/medium/high bucket for a mastery level."""
    config = config or settings.recommendation
    if mastery_level < config.low_mastery_ceiling:
        return "low"
    if mastery_level < config.high_mastery_floor:
        return "medium"
    return "high"


def compute_statistics(
    items: List[ScheduledItem],
    today: date,
    config: Optional[RecommendationSettings] = None,
) -> ReviewStatistics:
    """Compute summary counts for a review plan."""
    stats = ReviewStatistics(total_review_words=len(items))
    difficulty_stats: Dict[int, int] = defaultdict(int)
    phase_stats: Dict[str, int] = defaultdict(int)

    for item in items:
        review_date = item.progress.next_review_date
        if review_date < today:
            stats.overdue_words += 1
        elif review_date == today:
            stats.today_words += 1
        else:
            stats.upcoming_words += 1

        difficulty_stats[item.item.difficulty] += 1
        phase_stats[item.progress.phase.value] += 1
        stats.mastery_distribution[mastery_bucket(item.progress.mastery_level, config)] += 1

    stats.difficulty_distribution = dict(sorted(difficulty_stats.items()))
    stats.phase_distribution = dict(sorted(phase_stats.items()))
    return stats


# Recommendation rules. Each returns a message or None.

def recommend_overdue_first(stats: ReviewStatistics, config: RecommendationSettings) -> Optional[str]:
    if stats.overdue_words > config.overdue_threshold:
        return (
            f"You have {stats.overdue_words} overdue words. "
            "Prioritize reviewing the overdue items first."
        )
    return None


def recommend_split_batches(stats: ReviewStatistics, config: RecommendationSettings) -> Optional[str]:
    if stats.today_words > config.due_today_threshold:
        return (
            "Today's review load is heavy. "
            "Split it into batches of 10-15 words."
        )
    return None


def recommend_more_practice(stats: ReviewStatistics, config: RecommendationSettings) -> Optional[str]:
    low_mastery_words = stats.mastery_distribution.get("low", 0)
    if low_mastery_words > config.low_mastery_threshold:
        return (
            f"{low_mastery_words} words have low mastery. "
            "Increase your practice frequency."
        )
    return None


def recommend_translation_practice(stats: ReviewStatistics, config: RecommendationSettings) -> Optional[str]:
    recognition_words = stats.phase_distribution.get(LearningPhase.RECOGNITION.value, 0)
    if recognition_words > config.recognition_threshold:
        return (
            "Many words are still in the recognition phase. "
            "Do more translation exercises to build understanding."
        )
    return None


def recommend_new_words(stats: ReviewStatistics, config: RecommendationSettings) -> Optional[str]:
    if stats.total_review_words < config.min_review_words:
        return (
            "Few words are due for review. "
            "Learn some new words to grow your vocabulary."
        )
    return None


RECOMMENDATION_RULES: List[Callable[[ReviewStatistics, RecommendationSettings], Optional[str]]] = [
    recommend_overdue_first,
    recommend_split_batches,
    recommend_more_practice,
    recommend_translation_practice,
    recommend_new_words,
]

BALANCED_PLAN_MESSAGE = "Your review plan is well balanced. Keep up the steady rhythm!"


def generate_recommendations(
    stats: ReviewStatistics,
    config: Optional[RecommendationSettings] = None,
) -> List[str]:
    """Generate ordered study advice from plan statistics."""
    config = config or settings.recommendation
    recommendations = []
    for rule in RECOMMENDATION_RULES:
        message = rule(stats, config)
        if message:
            recommendations.append(message)

    if not recommendations:
        recommendations.append(BALANCED_PLAN_MESSAGE)
    return recommendations


# Batch review actions

def mark_completed(record: ProgressRecord, now: datetime) -> ProgressRecord:
    """Mark a review as done without changing its next review date."""
    return replace(record, last_seen_at=now, needs_review=False)


def postpone(record: ProgressRecord, today: date, days: Optional[int] = None) -> ProgressRecord:
    """Push the next review back to tomorrow."""
    days = settings.schedule.postpone_days if days is None else days
    return replace(record, next_review_date=today + timedelta(days=days), needs_review=True)


def reset(record: ProgressRecord, today: date, first_interval: int = 1) -> ProgressRecord:
    """Send the record back to the bottom of the interval ladder, due today."""
    return replace(
        record,
        next_review_date=today,
        retention_level=0,
        review_interval=first_interval,
        streak_count=0,
        needs_review=True,
    )
