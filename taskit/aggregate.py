# taskit/aggregate.py
"""Duration totals over a (filtered) event set."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .model import Event

ZERO = dt.timedelta(0)


@dataclass(frozen=True)
class Aggregate:
    total: dt.timedelta
    by_category: Dict[str, dt.timedelta]  # sorted by name
    by_tag: Dict[str, dt.timedelta]  # sorted by name


@dataclass(frozen=True)
class DayGroup:
    date: dt.date
    total: dt.timedelta
    events: Tuple[Event, ...]


def total_duration(events: Iterable[Event]) -> dt.timedelta:
    return sum((ev.duration for ev in events), ZERO)


def category_totals(events: Iterable[Event], categories: Iterable[str]) -> Dict[str, dt.timedelta]:
    """Every name in `categories` (zero if unused) plus any other category seen in `events`."""
    sums: Dict[str, dt.timedelta] = {c: ZERO for c in categories}
    for ev in events:
        sums[ev.category] = sums.get(ev.category, ZERO) + ev.duration
    return {k: sums[k] for k in sorted(sums)}


def tag_totals(
    by_category: Mapping[str, dt.timedelta],
    tags: Iterable[str],
    tag_map: Mapping[str, Sequence[str]],
) -> Dict[str, dt.timedelta]:
    """Tag total = sum of the totals of every category mapped to that tag."""
    sums: Dict[str, dt.timedelta] = {t: ZERO for t in tags}
    for cat, dur in by_category.items():
        for tag in tag_map.get(cat, ()):
            sums[tag] = sums.get(tag, ZERO) + dur
    return {k: sums[k] for k in sorted(sums)}


def aggregate(
    events: Sequence[Event],
    categories: Iterable[str],
    tags: Iterable[str],
    tag_map: Mapping[str, Sequence[str]],
) -> Aggregate:
    by_category = category_totals(events, categories)
    return Aggregate(
        total=total_duration(events),
        by_category=by_category,
        by_tag=tag_totals(by_category, tags, tag_map),
    )


def newest_first(events: Iterable[Event]) -> List[Event]:
    return sorted(events, key=lambda ev: ev.sort_key(), reverse=True)


def group_by_day(events: Iterable[Event]) -> List[DayGroup]:
    """Group consecutive events sharing a date, keeping input order."""
    groups: List[DayGroup] = []
    cur_date = None
    cur: List[Event] = []
    for ev in events:
        if cur and ev.date != cur_date:
            groups.append(DayGroup(cur_date, total_duration(cur), tuple(cur)))  # type: ignore[arg-type]
            cur = []
        cur_date = ev.date
        cur.append(ev)
    if cur:
        groups.append(DayGroup(cur_date, total_duration(cur), tuple(cur)))  # type: ignore[arg-type]
    return groups


__all__ = [
    "Aggregate",
    "DayGroup",
    "aggregate",
    "category_totals",
    "group_by_day",
    "newest_first",
    "tag_totals",
    "total_duration",
]
