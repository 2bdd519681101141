"""Wall-clock source used by the ledger and timer engine."""

from __future__ import annotations

import datetime as dt
from typing import Protocol


class Clock(Protocol):
    def now(self) -> dt.datetime:
        ...


class SystemClock:
    """Returns timezone-aware local timestamps."""

    def now(self) -> dt.datetime:
        return dt.datetime.now().astimezone()
