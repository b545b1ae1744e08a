from __future__ import annotations

import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Current UTC time as integer epoch seconds."""
        ...


class SystemClock:
    def now(self) -> int:
        return int(datetime.datetime.now(datetime.UTC).timestamp())


class ManualClock:
    """Clock for tests and replays; only moves when told to."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int = 1) -> int:
        self._now += seconds
        return self._now
