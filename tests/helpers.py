from newscred.models import FeatureSet

NEUTRAL_ARTICLE = (
    "The city planning office released its annual report on Tuesday. Officials said the new park "
    "will open in the spring. \"We are pleased with the progress,\" said the director. The report "
    "noted that traffic on the bridge declined this year. Residents can read the full report online "
    "at the library."
)

CLICKBAIT_ARTICLE = (
    "SHOCKING TRUTH!!! You won't believe what EXPERTS HATE about this amazing, incredible, "
    "unbelievable trick!!!! Secret revealed!"
)

NEUTRAL_FEATURES = dict(
    word_count=200,
    sentence_count=10,
    has_exclamation=False,
    has_question=False,
    has_quotes=True,
    uppercase_ratio=0.02,
    emotional_word_count=0,
    sensational_phrase_count=0,
    average_words_per_sentence=20.0,
    complex_word_count=40,
    vocabulary_complexity=20.0,
    grammar_issue_count=0,
    grammar_quality=100.0,
    exclamation_count=0,
)

# Overrides that each switch exactly one fake indicator on.
INDICATOR_OVERRIDES = [
    {"emotional_word_count": 3},
    {"sensational_phrase_count": 1},
    {"uppercase_ratio": 0.2},
    {"has_exclamation": True, "exclamation_count": 3},
    {"word_count": 49},
    {"grammar_quality": 60.0},
]


def make_features(*indicator_indexes: int, **overrides) -> FeatureSet:
    values = dict(NEUTRAL_FEATURES)
    for index in indicator_indexes:
        values.update(INDICATOR_OVERRIDES[index])
    values.update(overrides)
    return FeatureSet(**values)
