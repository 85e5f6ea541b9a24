from __future__ import annotations

import time
from datetime import datetime

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def local_date(epoch_ms: int) -> str:
    """Local calendar day (YYYY-MM-DD) of an epoch-ms timestamp."""
    return datetime.fromtimestamp(epoch_ms / 1000).date().isoformat()


def get_now() -> int:
    """FastAPI dependency supplying "now"; overridden in tests."""
    return now_ms()
