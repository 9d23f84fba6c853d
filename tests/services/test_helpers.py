"""Tests for shared service-layer helper functions."""

from __future__ import annotations

import time
from datetime import datetime

from ontoctl.services._helpers import elapsed_ms, now_iso


class TestNowIso:
    def test_parses_as_utc(self) -> None:
        parsed = datetime.fromisoformat(now_iso())
        assert parsed.utcoffset() is not None
        assert parsed.utcoffset().total_seconds() == 0  # type: ignore[union-attr]

    def test_second_precision(self) -> None:
        assert "." not in now_iso()


class TestElapsedMs:
    def test_non_negative_and_rounded(self) -> None:
        started = time.perf_counter()
        value = elapsed_ms(started)
        assert value >= 0
        assert round(value, 2) == value
