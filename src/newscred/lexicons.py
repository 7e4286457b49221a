"""
Static word lists used by the feature extractors.

Every list is matched as a case-insensitive substring, one hit per entry
present in the text (not per occurrence). Substring matching means
"amazingly" counts as "amazing" and the grammar fragment "u" matches most
English words containing that letter; both are known weaknesses kept so
verdicts stay stable across releases.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class Lexicon:
    emotional_words: tuple[str, ...]
    sensational_phrases: tuple[str, ...]
    grammar_issue_fragments: tuple[str, ...] = ("ur", "u")
    grammar_issue_marker: str = "!!!!"
    date_terms: tuple[str, ...] = ("today", "yesterday")
    author_terms: tuple[str, ...] = ("author", "reporter")
    attribution_terms: tuple[str, ...] = ("according to", "source")
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def extended(self, **extra: Iterable[str]) -> "Lexicon":
        """Return a copy with additional terms appended to the named lists."""
        updates: dict[str, tuple[str, ...]] = {}
        for name, terms in extra.items():
            current = getattr(self, name)
            if not isinstance(current, tuple):
                raise ValueError(f"Lexicon field {name!r} is not a term list")
            merged = list(current)
            for term in terms:
                term = term.lower().strip()
                if term and term not in merged:
                    merged.append(term)
            updates[name] = tuple(merged)
        return replace(self, **updates)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: "Lexicon | None" = None) -> "Lexicon":
        """Build a lexicon from a JSON-like mapping, falling back to ``base`` per field."""
        base = base or ANALYSIS_LEXICON
        values: dict[str, Any] = {}
        for name in (
            "emotional_words",
            "sensational_phrases",
            "grammar_issue_fragments",
            "date_terms",
            "author_terms",
            "attribution_terms",
        ):
            terms = data.get(name)
            if terms is None:
                values[name] = getattr(base, name)
            elif isinstance(terms, list) and all(isinstance(t, str) for t in terms):
                values[name] = tuple(t.lower() for t in terms if t.strip())
            else:
                raise ValueError(f"Lexicon field {name!r} must be a list of strings")
        marker = data.get("grammar_issue_marker", base.grammar_issue_marker)
        if not isinstance(marker, str) or not marker:
            raise ValueError("grammar_issue_marker must be a non-empty string")
        return cls(grammar_issue_marker=marker, metadata=dict(data.get("metadata") or {}), **values)


ANALYSIS_LEXICON = Lexicon(
    emotional_words=("shocking", "unbelievable", "amazing", "terrible", "incredible"),
    sensational_phrases=("you won't believe", "shocking truth", "experts hate", "secret revealed"),
)

TRAINING_LEXICON = ANALYSIS_LEXICON.extended(
    emotional_words=(
        "devastating",
        "outrageous",
        "fantastic",
        "horrible",
        "wonderful",
        "disgusting",
        "brilliant",
        "awful",
        "spectacular",
        "dreadful",
    ),
    sensational_phrases=(
        "doctors don't want",
        "this will change",
        "never seen before",
        "mind-blowing",
    ),
)


def count_terms(lowered_text: str, terms: Iterable[str]) -> int:
    return sum(1 for term in terms if term in lowered_text)


def mentions_any(lowered_text: str, terms: Iterable[str]) -> bool:
    return any(term in lowered_text for term in terms)
