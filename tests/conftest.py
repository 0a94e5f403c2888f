from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the application factory off the real data directory during tests.
os.environ.setdefault("HISTORY_BACKEND", "memory")
