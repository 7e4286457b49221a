import sys
from pathlib import Path
import os


# Ensure project src is on path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for p in (ROOT, SRC):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

# Keep tests on in-memory storage and skip the .env-driven Redis connection
os.environ["REDIS_URL"] = ""
os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
