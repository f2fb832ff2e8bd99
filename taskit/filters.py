# taskit/filters.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Sequence, Union

from .model import Event


class FilterColumn(IntEnum):
    """Dashboard header columns, in display order."""

    START_DATE = 0
    END_DATE = 1
    CATEGORY = 2
    DESCRIPTION = 3

    @property
    def title(self) -> str:
        return _COLUMN_TITLES[self]


_COLUMN_TITLES = {
    FilterColumn.START_DATE: "Start Date",
    FilterColumn.END_DATE: "End Date",
    FilterColumn.CATEGORY: "Category",
    FilterColumn.DESCRIPTION: "Description",
}


@dataclass(frozen=True)
class StartDateFilter:
    """Events on or after `date`."""

    date: dt.date

    def matches(self, ev: Event) -> bool:
        return ev.date >= self.date

    def __str__(self) -> str:
        return f"At/After: {self.date}"


@dataclass(frozen=True)
class EndDateFilter:
    """Events on or before `date`."""

    date: dt.date

    def matches(self, ev: Event) -> bool:
        return ev.date <= self.date

    def __str__(self) -> str:
        return f"At/Before: {self.date}"


@dataclass(frozen=True)
class CategoryFilter:
    category: str

    def matches(self, ev: Event) -> bool:
        return ev.category == self.category

    def __str__(self) -> str:
        return f"Category: {self.category}"


@dataclass(frozen=True)
class DescriptionFilter:
    """Case-sensitive substring match on the description."""

    text: str = ""

    def matches(self, ev: Event) -> bool:
        return self.text in ev.description

    def append(self, ch: str) -> "DescriptionFilter":
        return DescriptionFilter(self.text + ch)

    def backspace(self) -> "DescriptionFilter":
        return DescriptionFilter(self.text[:-1])

    def __str__(self) -> str:
        return f"Description contains: {self.text}"


Filter = Union[StartDateFilter, EndDateFilter, CategoryFilter, DescriptionFilter]


def matches_all(filters: Iterable[Filter], ev: Event) -> bool:
    return all(f.matches(ev) for f in filters)


def active_filters(applied: Sequence[Filter], editing: Optional[Filter] = None) -> List[Filter]:
    """Confirmed filters plus the one under edit, if any."""
    out = list(applied)
    if editing is not None:
        out.append(editing)
    return out


def apply_filters(
    events: Iterable[Event],
    filters: Sequence[Filter],
    editing: Optional[Filter] = None,
) -> List[Event]:
    fs = active_filters(filters, editing)
    return [ev for ev in events if matches_all(fs, ev)]


__all__ = [
    "CategoryFilter",
    "DescriptionFilter",
    "EndDateFilter",
    "Filter",
    "FilterColumn",
    "StartDateFilter",
    "active_filters",
    "apply_filters",
    "matches_all",
]
