from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Prediction = Literal["real", "fake"]

BUILT_IN_MODEL = {"type": "built-in", "name": "Built-in Rule-based Model"}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ArticleInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)
    title: str | None = None

    @field_validator("text")
    @classmethod
    def _reject_blank_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Article text must not be empty")
        return value


class FeatureSet(BaseModel):
    """Analysis-profile features extracted from one article."""

    model_config = ConfigDict(frozen=True)

    word_count: int = Field(..., ge=0)
    sentence_count: int = Field(..., ge=0)
    has_exclamation: bool
    has_question: bool
    has_quotes: bool
    uppercase_ratio: float = Field(..., ge=0.0, le=1.0)
    emotional_word_count: int = Field(..., ge=0)
    sensational_phrase_count: int = Field(..., ge=0)
    average_words_per_sentence: float = Field(..., ge=0.0)
    complex_word_count: int = Field(..., ge=0)
    vocabulary_complexity: float = Field(..., ge=0.0, le=100.0)
    grammar_issue_count: int = Field(..., ge=0)
    grammar_quality: float = Field(..., ge=0.0, le=100.0)
    exclamation_count: int = Field(0, ge=0)
    mentions_date: bool = False
    mentions_author: bool = False
    has_attribution: bool = False


class DetailSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    flags: list[str]
    metrics: dict[str, float] = Field(default_factory=dict)


class DetailedAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    content_language: DetailSection
    structural: DetailSection
    credibility: DetailSection
    linguistic: DetailSection


class VerdictResult(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    prediction: Prediction
    confidence: int = Field(..., ge=55, le=95)
    explanation: str
    key_factors: list[str]
    detailed_analysis: DetailedAnalysis
    model_used: dict[str, str] = Field(default_factory=lambda: dict(BUILT_IN_MODEL))


class FeedbackRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    article_text: str
    model_prediction: str
    confidence_score: float
    user_rating: int = Field(..., ge=1, le=5)
    user_feedback: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)

    @field_validator("confidence_score")
    @classmethod
    def _normalize_confidence(cls, value: float) -> float:
        # Thresholds downstream compare against 2-decimal values.
        return round(min(100.0, max(0.0, float(value))), 2)

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Naive datetimes are taken to be UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class TextFeatures(BaseModel):
    """Weighting-profile features persisted alongside a feedback event."""

    model_config = ConfigDict(frozen=True)

    word_count: int
    sentence_count: int
    avg_word_length: float
    avg_sentence_length: float
    exclamation_count: int
    question_count: int
    uppercase_ratio: float
    has_exclamation: bool
    has_question: bool
    has_quotes: bool
    numeric_count: int
    emotional_words: int
    sensational_phrases: int
    complex_word_count: int
    grammar_issue_count: int
    grammar_quality: float
    # Unclamped: very long sentences push this below zero.
    readability_score: float
    complexity_score: float


class TrainingInsight(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern_type: Literal["positive_example", "negative_example"]
    confidence_accuracy: float = Field(..., ge=0.0)
    text_complexity: float
    emotional_intensity: int
    structural_quality: bool
    training_priority: Literal["high", "medium"]


class TrainingRecord(BaseModel):
    id: str
    user_id: str
    feedback_id: str
    article_text: str
    model_prediction: str
    user_rating: int
    user_feedback: str | None = None
    confidence_score: float
    training_weight: float = Field(..., ge=0.1, le=3.0)
    text_features: TextFeatures
    prediction_accuracy: Literal["good", "needs_improvement"]
    confidence_vs_rating: float
    processed_for_training: bool = False
    model_type: str = "built-in"
    insight: TrainingInsight | None = None
    created_at: datetime = Field(default_factory=utcnow)


class Insights(BaseModel):
    total_feedback: int = 0
    avg_rating: float = 0.0
    accuracy_trends: float = 0.0
    high_confidence_accuracy: float = 0.0


class FeedbackStats(BaseModel):
    total_feedback: int = 0
    avg_rating: float = 0.0
    avg_confidence: float = 0.0


class AnalysisHistoryItem(BaseModel):
    id: str
    user_id: str
    title: str | None = None
    article_text: str
    prediction: Prediction
    confidence_score: int
    explanation: str
    key_factors: list[str]
    created_at: datetime = Field(default_factory=utcnow)


class HistoryPage(BaseModel):
    data: list[AnalysisHistoryItem] = Field(default_factory=list)
    total_count: int = 0
    has_more: bool = False


def dump_record(record: BaseModel) -> dict[str, Any]:
    return record.model_dump(mode="json")
