# taskit/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Tuple

from dateutil import parser as date_parser

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_HHMM_COMPACT_RE = re.compile(r"^(\d{2})(\d{2})$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    """Parse "H:MM", "HH:MM" or "HHMM" into (hour, minute).

    Range checks are done here so callers never see an out-of-range pair.
    """
    raw = (s or "").strip()
    m = _HHMM_RE.match(raw) or _HHMM_COMPACT_RE.match(raw)
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_date_loose(s: str, *, today: Optional[dt.date] = None) -> dt.date:
    """Parse a user-typed date.

    Accepts YYYY-MM-DD, "today", "yesterday" and anything dateutil can read
    (e.g. "Jan 3 2024"). Raises ValueError otherwise.
    """
    raw = (s or "").strip()
    if not raw:
        raise ValueError("date must not be empty")
    base = today or dt.date.today()
    low = raw.lower()
    if low == "today":
        return base
    if low == "yesterday":
        return base - dt.timedelta(days=1)
    try:
        return parse_date_yyyy_mm_dd(raw)
    except ValueError:
        pass
    try:
        default = dt.datetime(base.year, base.month, base.day)
        return date_parser.parse(raw, default=default).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date: {s!r}") from e
