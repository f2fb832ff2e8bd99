# taskit/util/duration.py
from __future__ import annotations

import datetime as dt

MINUTES_PER_DAY = 24 * 60


def total_minutes(d: dt.timedelta) -> int:
    return int(d.total_seconds() // 60)


def format_duration(d: dt.timedelta) -> str:
    """Compact "8h30m" / "45m" / "2h" rendering; zero renders as "0m"."""
    mins = total_minutes(d)
    sign = "-" if mins < 0 else ""
    mins = abs(mins)
    h, m = divmod(mins, 60)
    out = ""
    if h:
        out += f"{h}h"
    if m or not h:
        out += f"{m}m"
    return sign + out


def format_clock(d: dt.timedelta) -> str:
    """Stopwatch-style HH:MM."""
    h, m = divmod(max(0, total_minutes(d)), 60)
    return f"{h:02d}:{m:02d}"
