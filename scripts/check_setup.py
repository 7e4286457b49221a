#!/usr/bin/env python3
"""
Check that a deployment's settings, lexicons and storage are usable.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from dotenv import load_dotenv  # noqa: E402

from data_loader import load_datasets  # noqa: E402
from newscred.config import get_settings  # noqa: E402
from newscred.engine import CredibilityEngine  # noqa: E402
from newscred.storage import StorageManager  # noqa: E402

SAMPLE = (
    "The city council approved the budget on Tuesday, according to the clerk. "
    "Officials said the plan funds road repairs and two new libraries."
)


async def check_storage(redis_url: str) -> str:
    storage = StorageManager(redis_url)
    await storage.connect()
    try:
        return "redis" if await storage.ping() else "memory"
    finally:
        await storage.close()


def main() -> int:
    load_dotenv()
    settings = get_settings()
    print(f"{settings.title} v{settings.version}")

    lexicons = load_datasets(settings.data_dir)["_lexicons"]
    for profile, lexicon in lexicons.items():
        print(
            f"  {profile} lexicon: {len(lexicon.emotional_words)} emotional words, "
            f"{len(lexicon.sensational_phrases)} sensational phrases"
        )

    engine = CredibilityEngine(analysis_lexicon=lexicons["analysis"], training_lexicon=lexicons["training"])
    verdict = engine.analyze(SAMPLE, "Council passes budget")
    print(f"  sample verdict: {verdict.prediction} ({verdict.confidence}%)")

    backend = asyncio.run(check_storage(settings.redis_url))
    print(f"  storage: {backend}")
    if settings.redis_url and backend != "redis":
        print("  Redis configured but unreachable; feedback will not survive a restart.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
