from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import ValidationError

from .errors import InvalidInputError
from .features import extract_features
from .insights import DEFAULT_HISTORY_LIMIT, compute_insights
from .lexicons import ANALYSIS_LEXICON, TRAINING_LEXICON, Lexicon
from .models import ArticleInput, FeedbackRecord, Insights, TrainingRecord, VerdictResult
from .scorer import CredibilityScorer
from .training import build_training_record

logger = logging.getLogger(__name__)


@dataclass
class CredibilityEngine:
    """Entry point for the heuristic analysis and feedback-weighting paths.

    Everything the engine needs is passed in; it never reads global settings.
    """

    scorer: CredibilityScorer = field(default_factory=CredibilityScorer)
    analysis_lexicon: Lexicon = ANALYSIS_LEXICON
    training_lexicon: Lexicon = TRAINING_LEXICON
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def analyze(self, article_text: str, article_title: str | None = None) -> VerdictResult:
        if not article_text or not article_text.strip():
            raise InvalidInputError("Please enter some text to analyze.")
        article = ArticleInput(text=article_text, title=article_title)
        features = extract_features(article.text, article.title, lexicon=self.analysis_lexicon)
        verdict = self.scorer.classify(features, article.title)
        logger.debug(
            "Analyzed %d words: %s (%d%%)", features.word_count, verdict.prediction, verdict.confidence
        )
        return verdict

    def submit_feedback(
        self,
        article_text: str,
        model_prediction: str,
        confidence_score: float,
        user_rating: int,
        user_feedback: str | None = None,
        *,
        user_id: str,
        feedback_id: str,
        timestamp: datetime | None = None,
    ) -> TrainingRecord:
        if isinstance(user_rating, bool) or not isinstance(user_rating, int):
            raise InvalidInputError(f"Rating must be an integer between 1 and 5, got {user_rating!r}")
        if not 1 <= user_rating <= 5:
            raise InvalidInputError(f"Rating must be between 1 and 5, got {user_rating}")
        if not article_text or not article_text.strip():
            raise InvalidInputError("Feedback must reference a non-empty article.")
        payload = {
            "article_text": article_text,
            "model_prediction": model_prediction,
            "confidence_score": confidence_score,
            "user_rating": user_rating,
            "user_feedback": user_feedback,
        }
        if timestamp is not None:
            payload["timestamp"] = timestamp
        try:
            feedback = FeedbackRecord(**payload)
        except ValidationError as exc:
            raise InvalidInputError(str(exc)) from exc
        record = build_training_record(
            feedback,
            user_id=user_id,
            feedback_id=feedback_id,
            lexicon=self.training_lexicon,
        )
        logger.debug(
            "Feedback %s weighted %.2f (%s)", feedback_id, record.training_weight, record.insight.pattern_type
        )
        return record

    def insights(self, history: Sequence[TrainingRecord]) -> Insights:
        return compute_insights(history, limit=self.history_limit)
