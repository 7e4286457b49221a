"""
Feedback weighting: turns a user's rating of a verdict into a weighted,
persistable training example.
"""

from __future__ import annotations

import uuid

from .features import extract_text_features
from .lexicons import TRAINING_LEXICON, Lexicon
from .models import FeedbackRecord, TextFeatures, TrainingInsight, TrainingRecord

MIN_WEIGHT = 0.1
MAX_WEIGHT = 3.0
DETAILED_FEEDBACK_LENGTH = 20
DETAILED_FEEDBACK_BONUS = 0.5
EXTREME_RATING_BONUS = 0.3
EXTREME_RATINGS = (1, 5)
GOOD_RATING = 4


def compute_training_weight(feedback: FeedbackRecord) -> float:
    """Weight in [0.1, 3.0]; ratings that agree with the model's confidence weigh more."""
    rating_score = feedback.user_rating / 5
    confidence_score = feedback.confidence_score / 100
    confidence_accuracy = abs(confidence_score - rating_score)
    base_weight = max(MIN_WEIGHT, 2 - confidence_accuracy)

    feedback_bonus = 0.0
    if feedback.user_feedback and len(feedback.user_feedback) > DETAILED_FEEDBACK_LENGTH:
        feedback_bonus = DETAILED_FEEDBACK_BONUS
    extreme_bonus = EXTREME_RATING_BONUS if feedback.user_rating in EXTREME_RATINGS else 0.0

    return min(MAX_WEIGHT, base_weight + feedback_bonus + extreme_bonus)


def classify_pattern(feedback: FeedbackRecord, features: TextFeatures) -> TrainingInsight:
    # confidence/20 puts a 0-100 confidence on the same 0-5 axis as the rating.
    return TrainingInsight(
        pattern_type="positive_example" if feedback.user_rating >= GOOD_RATING else "negative_example",
        confidence_accuracy=abs(feedback.confidence_score / 20 - feedback.user_rating),
        text_complexity=features.complexity_score,
        emotional_intensity=features.emotional_words + features.sensational_phrases,
        structural_quality=10 < features.avg_sentence_length < 25,
        training_priority="high" if feedback.user_rating in EXTREME_RATINGS else "medium",
    )


def prediction_accuracy(user_rating: int) -> str:
    return "good" if user_rating >= GOOD_RATING else "needs_improvement"


def confidence_vs_rating(feedback: FeedbackRecord) -> float:
    return round((feedback.confidence_score / 20 - feedback.user_rating) * 100) / 100


def build_training_record(
    feedback: FeedbackRecord,
    *,
    user_id: str,
    feedback_id: str,
    lexicon: Lexicon = TRAINING_LEXICON,
    model_type: str = "built-in",
) -> TrainingRecord:
    features = extract_text_features(feedback.article_text, lexicon=lexicon)
    return TrainingRecord(
        id=uuid.uuid4().hex,
        user_id=user_id,
        feedback_id=feedback_id,
        article_text=feedback.article_text,
        model_prediction=feedback.model_prediction,
        user_rating=feedback.user_rating,
        user_feedback=feedback.user_feedback,
        confidence_score=feedback.confidence_score,
        training_weight=round(compute_training_weight(feedback), 2),
        text_features=features,
        prediction_accuracy=prediction_accuracy(feedback.user_rating),
        confidence_vs_rating=confidence_vs_rating(feedback),
        model_type=model_type,
        insight=classify_pattern(feedback, features),
        created_at=feedback.timestamp,
    )
