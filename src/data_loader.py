"""
Dataset loader for NewsCred lexicons.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from newscred.lexicons import ANALYSIS_LEXICON, TRAINING_LEXICON, Lexicon

logger = logging.getLogger(__name__)

LEXICON_PROFILES = {
    "analysis": ANALYSIS_LEXICON,
    "training": TRAINING_LEXICON,
}


def load_json(path: Path) -> Any:
    """Load a JSON file with UTF-8 encoding."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _make_key(base: Path, path: Path) -> str:
    rel = path.relative_to(base)
    rel_no_suffix = rel.with_suffix("")
    return rel_no_suffix.as_posix().replace("/", "__")


def build_lexicons(datasets: Dict[str, Any]) -> Dict[str, Lexicon]:
    """
    Build one Lexicon per profile from ``lexicons__<profile>`` datasets.
    Profiles without a dataset, or with an invalid one, keep the built-in lists.
    """
    lexicons: Dict[str, Lexicon] = {}
    for profile, default in LEXICON_PROFILES.items():
        data = datasets.get(f"lexicons__{profile}")
        if not isinstance(data, dict):
            lexicons[profile] = default
            continue
        try:
            lexicons[profile] = Lexicon.from_mapping(data, base=default)
        except ValueError as exc:
            logger.warning("Invalid %s lexicon, using built-in lists: %s", profile, exc)
            lexicons[profile] = default
            continue
        logger.info(
            "Loaded %s lexicon (emotional:%d sensational:%d)",
            profile,
            len(lexicons[profile].emotional_words),
            len(lexicons[profile].sensational_phrases),
        )
    datasets["_lexicons"] = lexicons
    return lexicons


def load_datasets(data_dir: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load all JSON files in data_dir into a dict keyed by relative path.
    Builds lexicons under datasets['_lexicons'].
    """
    data_path = Path(data_dir)
    datasets: Dict[str, Any] = {}

    if not data_path.exists():
        logger.warning("Data directory %s does not exist; using built-in lexicons", data_path)
        build_lexicons(datasets)
        return datasets

    files = sorted(data_path.rglob("*.json"))
    for fname in files:
        key = _make_key(data_path, fname)
        try:
            datasets[key] = load_json(fname)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load dataset %s: %s", fname, exc)

    build_lexicons(datasets)
    logger.info("Loaded datasets (%d files) from %s", len(files), data_path)
    return datasets
