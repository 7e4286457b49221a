from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
import random
from dataclasses import dataclass, field
from typing import Callable

from .models import DetailedAnalysis, DetailSection, FeatureSet, VerdictResult

RandomSource = Callable[[], float]

INDICATOR_COUNT = 6
FAKE_THRESHOLD = 3

CONFIDENCE_BASE = 70
CONFIDENCE_STEP = 5
CONFIDENCE_JITTER = 10
CONFIDENCE_FLOOR = 55
CONFIDENCE_CEILING = 95

NO_CONTENT_ISSUES = "No significant content issues detected"
NO_STRUCTURAL_ISSUES = "Proper article structure maintained"
NO_CREDIBILITY_ISSUES = "Standard credibility markers present"
NO_LINGUISTIC_ISSUES = "Linguistic patterns within normal range"


def fake_indicators(features: FeatureSet) -> list[bool]:
    """The six boolean misinformation indicators, in tally order."""
    return [
        features.emotional_word_count > 2,
        features.sensational_phrase_count > 0,
        features.uppercase_ratio > 0.1,
        features.has_exclamation and features.exclamation_count >= 3,
        features.word_count < 50,
        features.grammar_quality < 70,
    ]


def fake_indicator_tally(features: FeatureSet) -> int:
    return sum(1 for indicator in fake_indicators(features) if indicator)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_tenths(value: float) -> str:
    # Rounds the exact binary value; ties go up, unlike format(".1f").
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass
class CredibilityScorer:
    """Turn extracted features into a real/fake verdict.

    The only nondeterminism is the confidence jitter drawn from
    ``random_source`` (a callable returning a float in [0, 1)).
    """

    random_source: RandomSource = field(default=random.random)

    def confidence(self, tally: int) -> int:
        jitter = self.random_source() * CONFIDENCE_JITTER
        raw = CONFIDENCE_BASE + tally * CONFIDENCE_STEP + jitter
        return _round_half_up(min(CONFIDENCE_CEILING, max(CONFIDENCE_FLOOR, raw)))

    def classify(self, features: FeatureSet, title: str | None = None) -> VerdictResult:
        tally = fake_indicator_tally(features)
        is_fake = tally >= FAKE_THRESHOLD

        content_flags = self._content_flags(features)
        structural_flags = self._structural_flags(features)
        credibility_flags = self._credibility_flags(features)
        linguistic_flags = self._linguistic_flags(features)

        key_factors = [
            f"Word count: {features.word_count}",
            f"Emotional indicators: {features.emotional_word_count}",
            f"Grammar quality: {_format_tenths(features.grammar_quality)}%",
            f"Vocabulary complexity: {_format_tenths(features.vocabulary_complexity)}%",
            f"Structural integrity: {'Issues detected' if structural_flags else 'Good'}",
            f"Source credibility: {'Concerns' if credibility_flags else 'Adequate'}",
        ]

        detailed = DetailedAnalysis(
            content_language=DetailSection(
                flags=content_flags or [NO_CONTENT_ISSUES],
                metrics=self._content_metrics(features),
            ),
            structural=DetailSection(
                flags=structural_flags or [NO_STRUCTURAL_ISSUES],
                metrics=self._structural_metrics(features, title),
            ),
            credibility=DetailSection(
                flags=credibility_flags or [NO_CREDIBILITY_ISSUES],
                metrics=self._credibility_metrics(features),
            ),
            linguistic=DetailSection(
                flags=linguistic_flags or [NO_LINGUISTIC_ISSUES],
                metrics=self._linguistic_metrics(features),
            ),
        )

        return VerdictResult(
            prediction="fake" if is_fake else "real",
            confidence=self.confidence(tally),
            explanation=self._explanation(tally, is_fake),
            key_factors=key_factors,
            detailed_analysis=detailed,
        )

    @staticmethod
    def _explanation(tally: int, is_fake: bool) -> str:
        if is_fake:
            return (
                f"This article shows {tally} indicators commonly associated with misinformation, "
                "including emotional language patterns, structural irregularities, and credibility "
                "concerns. The analysis suggests caution when interpreting this content."
            )
        return (
            f"This article demonstrates {INDICATOR_COUNT - tally} positive credibility indicators, "
            "including balanced language, proper structure, and journalistic standards. The content "
            "appears to follow established news reporting practices."
        )

    @staticmethod
    def _content_flags(features: FeatureSet) -> list[str]:
        flags = []
        if features.emotional_word_count > 2:
            flags.append("High emotional language detected")
        if features.sensational_phrase_count > 0:
            flags.append("Sensational phrases found")
        if features.uppercase_ratio > 0.05:
            flags.append("Excessive capitalization")
        return flags

    @staticmethod
    def _structural_flags(features: FeatureSet) -> list[str]:
        flags = []
        if features.has_exclamation and features.exclamation_count >= 3:
            flags.append("Multiple exclamation marks")
        if features.word_count < 100:
            flags.append("Unusually short article")
        return flags

    @staticmethod
    def _credibility_flags(features: FeatureSet) -> list[str]:
        if not features.has_quotes:
            return ["No quoted sources"]
        return []

    @staticmethod
    def _linguistic_flags(features: FeatureSet) -> list[str]:
        flags = []
        if features.grammar_quality < 80:
            flags.append("Grammar issues detected")
        if features.vocabulary_complexity < 15:
            flags.append("Simple vocabulary usage")
        if features.average_words_per_sentence < 10:
            flags.append("Very short sentences")
        return flags

    @staticmethod
    def _content_metrics(features: FeatureSet) -> dict[str, float]:
        emotional = features.emotional_word_count
        sensational = features.sensational_phrase_count
        return {
            "emotionalLanguage": emotional * 10,
            "sensationalWords": sensational * 20,
            "biasIndicators": min(100.0, features.uppercase_ratio * 500),
            "factualClaims": max(0, 100 - emotional * 15),
            "sourcesMentioned": 70 if features.has_quotes else 20,
            "clickbaitScore": (emotional + sensational) * 15,
        }

    @staticmethod
    def _structural_metrics(features: FeatureSet, title: str | None) -> dict[str, float]:
        if title:
            headline = max(0, 100 - title.count("!") * 20)
        else:
            headline = 80
        return {
            "headlineCredibility": headline,
            "paragraphStructure": 85 if features.word_count > 200 else 60,
            "quotationUsage": 80 if features.has_quotes else 40,
            "dateReferences": 70 if features.mentions_date else 50,
        }

    @staticmethod
    def _credibility_metrics(features: FeatureSet) -> dict[str, float]:
        return {
            "authorCredibility": 75 if features.mentions_author else 45,
            "publicationCredibility": 65,
            "factCheckability": 75 if features.has_quotes else 50,
            "crossReferences": 70 if features.has_attribution else 40,
        }

    @staticmethod
    def _linguistic_metrics(features: FeatureSet) -> dict[str, float]:
        emotional = features.emotional_word_count
        sensational = features.sensational_phrase_count
        return {
            "grammarQuality": features.grammar_quality,
            "vocabularyComplexity": features.vocabulary_complexity,
            "sentimentConsistency": max(50, 100 - emotional * 10),
            "writingStyle": 80 if features.average_words_per_sentence > 8 else 60,
            "persuasionTechniques": (emotional + sensational) * 12,
            "logicalCoherence": 75 if features.sentence_count > 5 else 55,
        }
