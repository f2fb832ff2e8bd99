# taskit/delta.py
"""Mutation intents and the engine that folds them onto SaveData.

Intents are plain values that do not hold references into any loaded
snapshot, so a list produced against one load can be applied to a later
reload of the same file.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .model import Event
from .schema import SaveData


class EventIndexError(IndexError):
    """ChangeEvent pointed outside the current event list."""


class StaleEventError(LookupError):
    """An event an intent was derived from is no longer in the reloaded data."""


@dataclass(frozen=True)
class AddCategory:
    name: str


@dataclass(frozen=True)
class RenameCategory:
    old: str
    new: str


@dataclass(frozen=True)
class ArchiveCategory:
    name: str


@dataclass(frozen=True)
class AddEvent:
    event: Event


@dataclass(frozen=True)
class ChangeEvent:
    """Replace the event at `index`.

    `expected` is the event as it was when the index was chosen; `rebase`
    uses it to re-point the intent after a reload.
    """

    index: int
    event: Event
    expected: Optional[Event] = None


@dataclass(frozen=True)
class AddTag:
    tag: str


@dataclass(frozen=True)
class TagCategory:
    category: str
    tag: str


@dataclass(frozen=True)
class SetDailyNote:
    date: dt.date
    note: str


DeltaItem = Union[
    AddCategory,
    RenameCategory,
    ArchiveCategory,
    AddEvent,
    ChangeEvent,
    AddTag,
    TagCategory,
    SetDailyNote,
]


class _Draft:
    """Mutable working copy used while folding one batch of intents."""

    def __init__(self, data: SaveData):
        self.categories: List[str] = list(data.categories)
        self.archived: List[str] = list(data.archived_categories)
        self.tags: List[str] = list(data.tags)
        self.tag_map: Dict[str, List[str]] = {k: list(v) for k, v in data.tag_map.items()}
        self.events: List[Event] = list(data.events)
        self.daily_notes: Dict[dt.date, str] = dict(data.daily_notes)

    def freeze(self) -> SaveData:
        return SaveData(
            categories=tuple(self.categories),
            archived_categories=tuple(self.archived),
            tags=tuple(self.tags),
            tag_map={k: tuple(v) for k, v in self.tag_map.items()},
            events=tuple(self.events),
            daily_notes=dict(self.daily_notes),
        )


def _rename_in(names: List[str], old: str, new: str) -> None:
    if old not in names:
        return
    i = names.index(old)
    if new in names:
        del names[i]
    else:
        names[i] = new


def _apply_one(d: _Draft, item: DeltaItem) -> None:
    if isinstance(item, AddCategory):
        if item.name not in d.categories:
            d.categories.append(item.name)

    elif isinstance(item, ArchiveCategory):
        d.categories = [c for c in d.categories if c != item.name]
        d.archived.append(item.name)

    elif isinstance(item, AddEvent):
        d.events.append(item.event)

    elif isinstance(item, ChangeEvent):
        if not (0 <= item.index < len(d.events)):
            raise EventIndexError(
                f"cannot replace event {item.index}: only {len(d.events)} events exist"
            )
        d.events[item.index] = item.event

    elif isinstance(item, AddTag):
        if item.tag not in d.tags:
            d.tags.append(item.tag)

    elif isinstance(item, TagCategory):
        tags = d.tag_map.setdefault(item.category, [])
        if item.tag not in tags:
            tags.append(item.tag)

    elif isinstance(item, SetDailyNote):
        d.daily_notes[item.date] = item.note

    elif isinstance(item, RenameCategory):
        if item.old == item.new:
            return
        _rename_in(d.categories, item.old, item.new)
        _rename_in(d.archived, item.old, item.new)
        d.events = [
            replace(ev, category=item.new) if ev.category == item.old else ev
            for ev in d.events
        ]
        if item.old in d.tag_map:
            moved = d.tag_map.pop(item.old)
            merged = d.tag_map.setdefault(item.new, [])
            for tag in moved:
                if tag not in merged:
                    merged.append(tag)

    else:
        raise TypeError(f"unknown delta item: {type(item).__name__}")


def apply(data: SaveData, intents: Iterable[DeltaItem]) -> SaveData:
    """Fold `intents` left to right onto `data`; `data` itself is not modified."""
    d = _Draft(data)
    for item in intents:
        _apply_one(d, item)
    return d.freeze()


def resolve_reverse_index(events: Sequence[Event], reverse_index: int) -> int:
    """Absolute index of the event `reverse_index` places from the end (0 = latest)."""
    n = len(events)
    if reverse_index < 0 or reverse_index >= n:
        raise EventIndexError(f"no event at reverse index {reverse_index} ({n} events)")
    return n - 1 - reverse_index


def _relocate(events: Sequence[Event], index: int, expected: Event) -> int:
    if 0 <= index < len(events) and events[index] == expected:
        return index
    hits = [i for i, ev in enumerate(events) if ev == expected]
    if not hits:
        raise StaleEventError(f"event changed or removed since it was selected: {expected.label()}")
    # Identical duplicates: keep the one nearest the original position.
    return min(hits, key=lambda i: (abs(i - index), i))


def rebase(intents: Sequence[DeltaItem], data: SaveData) -> List[DeltaItem]:
    """Re-resolve snapshot-dependent intents against freshly loaded `data`.

    Only ChangeEvent carries a snapshot dependency. Intents earlier in the
    list can append events, so positions are checked against the list as it
    will look when each intent runs.
    """
    out: List[DeltaItem] = []
    events: List[Event] = list(data.events)
    for item in intents:
        if isinstance(item, ChangeEvent) and item.expected is not None:
            idx = _relocate(events, item.index, item.expected)
            if idx != item.index:
                item = replace(item, index=idx)
        if isinstance(item, AddEvent):
            events.append(item.event)
        elif isinstance(item, ChangeEvent) and 0 <= item.index < len(events):
            events[item.index] = item.event
        elif isinstance(item, RenameCategory):
            events = [
                replace(ev, category=item.new) if ev.category == item.old else ev
                for ev in events
            ]
        out.append(item)
    return out


def describe(item: DeltaItem) -> str:
    if isinstance(item, AddCategory):
        return f"add category {item.name}"
    if isinstance(item, RenameCategory):
        return f"rename category {item.old} -> {item.new}"
    if isinstance(item, ArchiveCategory):
        return f"archive category {item.name}"
    if isinstance(item, AddEvent):
        return f"add event {item.event.label()}"
    if isinstance(item, ChangeEvent):
        return f"change event #{item.index} -> {item.event.label()}"
    if isinstance(item, AddTag):
        return f"add tag #{item.tag}"
    if isinstance(item, TagCategory):
        return f"tag {item.category} with #{item.tag}"
    if isinstance(item, SetDailyNote):
        return f"set note for {item.date}"
    return type(item).__name__


__all__ = [
    "AddCategory",
    "AddEvent",
    "AddTag",
    "ArchiveCategory",
    "ChangeEvent",
    "DeltaItem",
    "EventIndexError",
    "RenameCategory",
    "SetDailyNote",
    "StaleEventError",
    "TagCategory",
    "apply",
    "describe",
    "rebase",
    "resolve_reverse_index",
]
