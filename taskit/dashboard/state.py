# taskit/dashboard/state.py
"""Dashboard state and its update function.

`update` is pure: it never touches the terminal. Anything that needs the
outside world (stopping the loop, running a full-screen prompt) comes back
as an effect value for the driver in `taskit.dashboard.app` to carry out.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, Union

from ..aggregate import Aggregate, aggregate, newest_first
from ..filters import (
    CategoryFilter,
    DescriptionFilter,
    EndDateFilter,
    Filter,
    FilterColumn,
    StartDateFilter,
    apply_filters,
)
from ..model import Event
from ..schema import SaveData

SCROLL_STEP = 3
LAST_COLUMN = len(FilterColumn) - 1


# --- Messages ------------------------------------------------------------------

@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ScrollUp:
    pass


@dataclass(frozen=True)
class ScrollDown:
    pass


@dataclass(frozen=True)
class CursorLeft:
    pass


@dataclass(frozen=True)
class CursorRight:
    pass


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class CharTyped:
    char: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class CommitFilter:
    pass


@dataclass(frozen=True)
class CancelFilter:
    pass


@dataclass(frozen=True)
class FilterChosen:
    """Result of a secondary prompt."""

    filter: Filter


@dataclass(frozen=True)
class PromptCancelled:
    pass


Message = Union[
    Quit,
    ScrollUp,
    ScrollDown,
    CursorLeft,
    CursorRight,
    Confirm,
    CharTyped,
    Backspace,
    CommitFilter,
    CancelFilter,
    FilterChosen,
    PromptCancelled,
]


# --- Effects -------------------------------------------------------------------

@dataclass(frozen=True)
class Halt:
    pass


@dataclass(frozen=True)
class PromptDate:
    column: FilterColumn

    def to_filter(self, day: dt.date) -> Filter:
        if self.column == FilterColumn.START_DATE:
            return StartDateFilter(day)
        return EndDateFilter(day)


@dataclass(frozen=True)
class PromptCategory:
    choices: Tuple[str, ...]

    def to_filter(self, category: str) -> Filter:
        return CategoryFilter(category)


Effect = Union[Halt, PromptDate, PromptCategory]


# --- State ---------------------------------------------------------------------

@dataclass(frozen=True)
class DashboardState:
    events: Tuple[Event, ...]  # newest first
    categories: Tuple[str, ...] = ()
    archived_categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    tag_map: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    daily_notes: Dict[dt.date, str] = field(default_factory=dict)
    scroll: int = 0
    column: int = 0
    applied: Tuple[Filter, ...] = ()
    editing: Optional[DescriptionFilter] = None

    @classmethod
    def from_save_data(cls, data: SaveData) -> "DashboardState":
        return cls(
            events=tuple(newest_first(data.events)),
            categories=data.categories,
            archived_categories=data.archived_categories,
            tags=data.tags,
            tag_map=dict(data.tag_map),
            daily_notes=dict(data.daily_notes),
        )

    @property
    def highlighted(self) -> FilterColumn:
        return FilterColumn(self.column)

    def visible_events(self) -> List[Event]:
        return apply_filters(self.events, self.applied, self.editing)

    def totals(self) -> Aggregate:
        return aggregate(self.visible_events(), self.categories, self.tags, self.tag_map)

    def category_choices(self) -> Tuple[str, ...]:
        return tuple(self.categories) + tuple(self.archived_categories)


def _confirm(state: DashboardState) -> Tuple[DashboardState, Optional[Effect]]:
    col = state.highlighted
    if col in (FilterColumn.START_DATE, FilterColumn.END_DATE):
        return state, PromptDate(col)
    if col == FilterColumn.CATEGORY:
        return state, PromptCategory(state.category_choices())
    return replace(state, editing=DescriptionFilter("")), None


def update(state: DashboardState, msg: Message) -> Tuple[DashboardState, Optional[Effect]]:
    if isinstance(msg, Quit):
        return state, Halt()

    if isinstance(msg, ScrollDown):
        return replace(state, scroll=state.scroll + SCROLL_STEP), None
    if isinstance(msg, ScrollUp):
        return replace(state, scroll=max(0, state.scroll - SCROLL_STEP)), None

    if isinstance(msg, CursorLeft):
        return replace(state, column=max(0, state.column - 1)), None
    if isinstance(msg, CursorRight):
        return replace(state, column=min(LAST_COLUMN, state.column + 1)), None

    if isinstance(msg, Confirm):
        if state.editing is not None:
            return state, None
        return _confirm(state)

    if isinstance(msg, CharTyped):
        if state.editing is None:
            return state, None
        return replace(state, editing=state.editing.append(msg.char)), None
    if isinstance(msg, Backspace):
        if state.editing is None:
            return state, None
        return replace(state, editing=state.editing.backspace()), None
    if isinstance(msg, CommitFilter):
        if state.editing is None:
            return state, None
        return replace(state, applied=state.applied + (state.editing,), editing=None), None
    if isinstance(msg, CancelFilter):
        return replace(state, editing=None), None

    if isinstance(msg, FilterChosen):
        return replace(state, applied=state.applied + (msg.filter,)), None
    if isinstance(msg, PromptCancelled):
        return state, None

    raise TypeError(f"unknown dashboard message: {type(msg).__name__}")


__all__ = [
    "Backspace",
    "CancelFilter",
    "CharTyped",
    "CommitFilter",
    "Confirm",
    "CursorLeft",
    "CursorRight",
    "DashboardState",
    "Effect",
    "FilterChosen",
    "Halt",
    "Message",
    "PromptCancelled",
    "PromptCategory",
    "PromptDate",
    "Quit",
    "SCROLL_STEP",
    "ScrollDown",
    "ScrollUp",
    "update",
]
