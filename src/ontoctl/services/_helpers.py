"""Shared service-layer helper functions."""

from __future__ import annotations

import time
from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as ISO 8601, second precision."""
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def elapsed_ms(started: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading, rounded to 0.01."""
    return round((time.perf_counter() - started) * 1000, 2)
