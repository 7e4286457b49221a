from __future__ import annotations

from collections.abc import Sequence

from .features import safe_ratio
from .models import FeedbackStats, Insights, TrainingRecord

DEFAULT_HISTORY_LIMIT = 100
HIGH_CONFIDENCE = 80


def newest_first(records: Sequence[TrainingRecord]) -> list[TrainingRecord]:
    return sorted(records, key=lambda record: record.created_at, reverse=True)


def compute_insights(history: Sequence[TrainingRecord], *, limit: int = DEFAULT_HISTORY_LIMIT) -> Insights:
    """Aggregate statistics over the ``limit`` most recent training records."""
    recent = newest_first(history)[:limit]
    if not recent:
        return Insights()
    total = len(recent)
    good = sum(1 for record in recent if record.prediction_accuracy == "good")
    confident_and_right = sum(
        1 for record in recent if record.confidence_score > HIGH_CONFIDENCE and record.user_rating >= 4
    )
    return Insights(
        total_feedback=total,
        avg_rating=safe_ratio(sum(record.user_rating for record in recent), total),
        accuracy_trends=safe_ratio(good, total) * 100,
        high_confidence_accuracy=safe_ratio(confident_and_right, total) * 100,
    )


def training_queue(records: Sequence[TrainingRecord]) -> list[TrainingRecord]:
    """Unprocessed records, heaviest first, newest first within equal weight."""
    pending = newest_first([record for record in records if not record.processed_for_training])
    # sorted() is stable, so the newest-first order survives within a weight.
    return sorted(pending, key=lambda record: record.training_weight, reverse=True)


def feedback_stats(rows: Sequence[dict]) -> FeedbackStats:
    if not rows:
        return FeedbackStats()
    total = len(rows)
    return FeedbackStats(
        total_feedback=total,
        avg_rating=safe_ratio(sum(row.get("user_rating") or 0 for row in rows), total),
        avg_confidence=safe_ratio(sum(row.get("confidence_score") or 0 for row in rows), total),
    )
