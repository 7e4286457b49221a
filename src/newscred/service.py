from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .engine import CredibilityEngine
from .errors import InvalidInputError, StorageError
from .insights import feedback_stats
from .models import FeedbackRecord, FeedbackStats, HistoryPage, Insights, TrainingRecord, VerdictResult
from .storage import TrainingRepository

logger = logging.getLogger(__name__)


@dataclass
class FeedbackReceipt:
    feedback_id: str
    training_record: TrainingRecord | None


def truncate_article(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


class CredibilityService:
    """Wires the engine to the persistence collaborator for one deployment."""

    def __init__(
        self,
        engine: CredibilityEngine,
        repository: TrainingRepository,
        *,
        history_limit: int = 100,
        max_article_length: int = 5000,
    ) -> None:
        self.engine = engine
        self.repository = repository
        self.history_limit = history_limit
        self.max_article_length = max_article_length

    async def analyze(self, user_id: str, text: str, title: str | None = None) -> VerdictResult:
        verdict = self.engine.analyze(text, title)
        try:
            await self.repository.save_analysis(user_id, text, title, verdict)
        except StorageError:
            logger.error("Failed to save analysis history for %s", user_id, exc_info=True)
        return verdict

    async def submit_feedback(
        self,
        user_id: str,
        article_text: str,
        model_prediction: str,
        confidence_score: float,
        user_rating: int,
        user_feedback: str | None = None,
    ) -> FeedbackReceipt:
        """Store the rating, then derive and store its training record.

        The rating write is the primary transaction and its failure propagates.
        The training write is best-effort: a failure is logged and the receipt
        comes back without a record.
        """
        if isinstance(user_rating, bool) or not isinstance(user_rating, int) or not 1 <= user_rating <= 5:
            raise InvalidInputError(f"Rating must be an integer between 1 and 5, got {user_rating!r}")
        if not article_text or not article_text.strip():
            raise InvalidInputError("Feedback must reference a non-empty article.")
        stored_text = truncate_article(article_text, self.max_article_length)
        feedback = FeedbackRecord(
            article_text=stored_text,
            model_prediction=model_prediction,
            confidence_score=confidence_score,
            user_rating=user_rating,
            user_feedback=user_feedback,
        )
        feedback_id = await self.repository.insert_feedback(
            {
                "user_id": user_id,
                "article_text": feedback.article_text,
                "model_prediction": feedback.model_prediction,
                "confidence_score": feedback.confidence_score,
                "user_rating": feedback.user_rating,
                "user_feedback": feedback.user_feedback,
            }
        )
        logger.info("Feedback %s stored for user %s (rating %d)", feedback_id, user_id, user_rating)

        try:
            record = self.engine.submit_feedback(
                feedback.article_text,
                feedback.model_prediction,
                feedback.confidence_score,
                feedback.user_rating,
                feedback.user_feedback,
                user_id=user_id,
                feedback_id=feedback_id,
                timestamp=feedback.timestamp,
            )
            await self.repository.insert_training_record(record)
        except Exception:
            logger.error("Feedback %s saved but training processing failed", feedback_id, exc_info=True)
            return FeedbackReceipt(feedback_id=feedback_id, training_record=None)

        logger.info("Training insights for %s: %s", feedback_id, record.insight.model_dump())
        return FeedbackReceipt(feedback_id=feedback_id, training_record=record)

    async def training_insights(self) -> Insights:
        history = await self.repository.get_recent_training_records(self.history_limit)
        return self.engine.insights(history)

    async def training_queue(self) -> List[TrainingRecord]:
        return await self.repository.get_training_queue()

    async def mark_processed(self, record_id: str) -> bool:
        return await self.repository.mark_processed(record_id)

    async def feedback_stats(self, user_id: str) -> FeedbackStats:
        rows = await self.repository.get_feedback_for_user(user_id, limit=self.history_limit)
        return feedback_stats(rows)

    async def history(self, user_id: str, *, page: int = 0, limit: int = 20, search: str | None = None) -> HistoryPage:
        return await self.repository.list_analyses(user_id, page=page, limit=limit, search=search)
