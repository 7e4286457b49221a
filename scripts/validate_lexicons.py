#!/usr/bin/env python3
"""
Quick validation of the lexicon JSON files.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from data_loader import LEXICON_PROFILES, load_datasets  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate NewsCred lexicon datasets.")
    parser.add_argument(
        "--data-dir",
        default=str(ROOT / "data"),
        help="Path to dataset directory (default: data/)",
    )
    args = parser.parse_args()

    datasets = load_datasets(args.data_dir)
    lexicons = datasets["_lexicons"]

    print(f"Loaded {len(datasets) - 1} datasets from {args.data_dir}")
    drifted = []
    for profile, lexicon in lexicons.items():
        print(f" - {profile}:")
        print(f"     emotional words:     {len(lexicon.emotional_words)}")
        print(f"     sensational phrases: {len(lexicon.sensational_phrases)}")
        print(f"     grammar fragments:   {', '.join(lexicon.grammar_issue_fragments)}")
        if lexicon != LEXICON_PROFILES[profile]:
            drifted.append(profile)

    if drifted:
        # Not an error: custom lexicons are allowed, but verdicts will differ.
        print(f"\nProfiles differing from built-in lists: {', '.join(drifted)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
