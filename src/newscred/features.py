"""
Feature extraction for article text.

Two profiles share the same tokenization:

* ``extract_features`` feeds the credibility scorer,
* ``extract_text_features`` feeds the feedback weighting pipeline and uses
  the extended training lexicon.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .errors import ComputationGuardError
from .lexicons import ANALYSIS_LEXICON, TRAINING_LEXICON, Lexicon, count_terms, mentions_any
from .models import FeatureSet, TextFeatures

logger = logging.getLogger(__name__)

SENTENCE_SPLIT = re.compile(r"[.!?]+")
UPPERCASE = re.compile(r"[A-Z]")
DIGIT = re.compile(r"[0-9]")

COMPLEX_WORD_LENGTH = 8


def divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        raise ComputationGuardError(f"cannot divide {numerator} by zero")
    return numerator / denominator


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, treating an empty denominator (0/0, n/0) as 0.0."""
    try:
        return divide(numerator, denominator)
    except ComputationGuardError as exc:
        logger.debug("Guarded ratio: %s", exc)
        return 0.0


@dataclass(frozen=True)
class _TextScan:
    text: str
    lowered: str
    words: list[str]
    sentences: list[str]

    @classmethod
    def of(cls, text: str) -> "_TextScan":
        sentences = [segment for segment in SENTENCE_SPLIT.split(text) if segment.strip()]
        return cls(text=text, lowered=text.lower(), words=text.split(), sentences=sentences)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def sentence_count(self) -> int:
        return len(self.sentences)

    @property
    def has_quotes(self) -> bool:
        return '"' in self.text or "'" in self.text

    def uppercase_ratio(self) -> float:
        return safe_ratio(len(UPPERCASE.findall(self.text)), len(self.text))

    def complex_word_count(self) -> int:
        return sum(1 for word in self.words if len(word) > COMPLEX_WORD_LENGTH)

    def grammar_issue_count(self, lexicon: Lexicon) -> int:
        issues = 0
        for word in self.words:
            lowered = word.lower()
            if any(fragment in lowered for fragment in lexicon.grammar_issue_fragments):
                issues += 1
            elif lexicon.grammar_issue_marker in word:
                issues += 1
        return issues

    def grammar_quality(self, lexicon: Lexicon) -> float:
        issue_share = safe_ratio(self.grammar_issue_count(lexicon), self.word_count) * 100
        return max(0.0, 100 - issue_share)


def extract_features(text: str, title: str | None = None, *, lexicon: Lexicon = ANALYSIS_LEXICON) -> FeatureSet:
    """Extract the analysis-profile features from ``text``.

    Callers reject blank text before getting here; an empty string still
    yields an all-zero feature set rather than a division error. ``title``
    is accepted for interface symmetry with the scorer, which scores the
    headline itself.
    """
    scan = _TextScan.of(text)
    complex_words = scan.complex_word_count()
    grammar_issues = scan.grammar_issue_count(lexicon)
    return FeatureSet(
        word_count=scan.word_count,
        sentence_count=scan.sentence_count,
        has_exclamation="!" in text,
        has_question="?" in text,
        has_quotes=scan.has_quotes,
        uppercase_ratio=scan.uppercase_ratio(),
        emotional_word_count=count_terms(scan.lowered, lexicon.emotional_words),
        sensational_phrase_count=count_terms(scan.lowered, lexicon.sensational_phrases),
        average_words_per_sentence=safe_ratio(scan.word_count, scan.sentence_count),
        complex_word_count=complex_words,
        vocabulary_complexity=safe_ratio(complex_words, scan.word_count) * 100,
        grammar_issue_count=grammar_issues,
        grammar_quality=scan.grammar_quality(lexicon),
        exclamation_count=text.count("!"),
        mentions_date=mentions_any(scan.lowered, lexicon.date_terms),
        mentions_author=mentions_any(scan.lowered, lexicon.author_terms),
        has_attribution=mentions_any(scan.lowered, lexicon.attribution_terms),
    )


def readability_score(avg_sentence_length: float) -> float:
    # Not clamped: sentences far above 65 words score negative.
    return 100 - (avg_sentence_length - 15) * 2


def extract_text_features(text: str, *, lexicon: Lexicon = TRAINING_LEXICON) -> TextFeatures:
    """Extract the weighting-profile features stored with each feedback event."""
    scan = _TextScan.of(text)
    avg_sentence_length = safe_ratio(scan.word_count, scan.sentence_count)
    complex_words = scan.complex_word_count()
    return TextFeatures(
        word_count=scan.word_count,
        sentence_count=scan.sentence_count,
        avg_word_length=safe_ratio(sum(len(word) for word in scan.words), scan.word_count),
        avg_sentence_length=avg_sentence_length,
        exclamation_count=text.count("!"),
        question_count=text.count("?"),
        uppercase_ratio=scan.uppercase_ratio(),
        has_exclamation="!" in text,
        has_question="?" in text,
        has_quotes=scan.has_quotes,
        numeric_count=len(DIGIT.findall(text)),
        emotional_words=count_terms(scan.lowered, lexicon.emotional_words),
        sensational_phrases=count_terms(scan.lowered, lexicon.sensational_phrases),
        complex_word_count=complex_words,
        grammar_issue_count=scan.grammar_issue_count(lexicon),
        grammar_quality=scan.grammar_quality(lexicon),
        readability_score=readability_score(avg_sentence_length),
        complexity_score=safe_ratio(complex_words, scan.word_count) * 100,
    )
