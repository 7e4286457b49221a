import json
from pathlib import Path

import pytest

from data_loader import build_lexicons, load_datasets
from newscred.lexicons import ANALYSIS_LEXICON, TRAINING_LEXICON, Lexicon


@pytest.fixture(scope="module")
def datasets():
    data_dir = Path(__file__).resolve().parents[1] / "data"
    return load_datasets(data_dir)


def test_shipped_lexicons_match_built_in_lists(datasets):
    lexicons = datasets["_lexicons"]
    assert lexicons["analysis"] == ANALYSIS_LEXICON
    assert lexicons["training"] == TRAINING_LEXICON


def test_training_lexicon_extends_analysis_lexicon():
    assert set(ANALYSIS_LEXICON.emotional_words) < set(TRAINING_LEXICON.emotional_words)
    assert set(ANALYSIS_LEXICON.sensational_phrases) < set(TRAINING_LEXICON.sensational_phrases)


def test_missing_data_dir_falls_back_to_built_ins(tmp_path):
    datasets = load_datasets(tmp_path / "nope")
    assert datasets["_lexicons"]["analysis"] == ANALYSIS_LEXICON


def test_custom_lexicon_file_extends_terms(tmp_path):
    lexicon_dir = tmp_path / "lexicons"
    lexicon_dir.mkdir()
    (lexicon_dir / "analysis.json").write_text(
        json.dumps({"emotional_words": ["Stunning", "shocking"]}), encoding="utf-8"
    )
    lexicons = load_datasets(tmp_path)["_lexicons"]
    assert lexicons["analysis"].emotional_words == ("stunning", "shocking")
    assert lexicons["analysis"].sensational_phrases == ANALYSIS_LEXICON.sensational_phrases
    assert lexicons["training"] == TRAINING_LEXICON


def test_invalid_lexicon_is_ignored():
    lexicons = build_lexicons({"lexicons__analysis": {"emotional_words": "not-a-list"}})
    assert lexicons["analysis"] == ANALYSIS_LEXICON


def test_extended_rejects_non_list_fields():
    with pytest.raises(ValueError):
        ANALYSIS_LEXICON.extended(grammar_issue_marker=["!!!"])


def test_lexicon_is_hashable_configuration():
    assert isinstance(hash(ANALYSIS_LEXICON.emotional_words), int)
    assert isinstance(Lexicon.from_mapping({}), Lexicon)
