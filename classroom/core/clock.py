from __future__ import annotations

import datetime


def now_ts() -> int:
    """Current UTC time as integer epoch seconds."""
    return int(datetime.datetime.now(datetime.UTC).timestamp())
