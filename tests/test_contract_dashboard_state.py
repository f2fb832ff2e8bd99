from __future__ import annotations

import datetime as dt
import unittest

from taskit.dashboard.state import (
    SCROLL_STEP,
    Backspace,
    CancelFilter,
    CharTyped,
    CommitFilter,
    Confirm,
    CursorLeft,
    CursorRight,
    DashboardState,
    FilterChosen,
    Halt,
    PromptCancelled,
    PromptCategory,
    PromptDate,
    Quit,
    ScrollDown,
    ScrollUp,
    update,
)
from taskit.filters import CategoryFilter, DescriptionFilter, EndDateFilter, FilterColumn, StartDateFilter
from taskit.model import Event, SimpleTime
from taskit.schema import SaveData


def ev(day: int, category: str, description: str = "") -> Event:
    return Event(SimpleTime.of(9, 0), SimpleTime.of(10, 0), dt.date(2024, 1, day), category, description)


def state() -> DashboardState:
    data = SaveData(
        categories=("Work", "Play"),
        archived_categories=("Old",),
        events=(ev(1, "Work", "alpha"), ev(3, "Play", "beta"), ev(2, "Work", "gamma")),
    )
    return DashboardState.from_save_data(data)


def run(s: DashboardState, *msgs):
    effect = None
    for m in msgs:
        s, effect = update(s, m)
    return s, effect


class TestDashboardStateContract(unittest.TestCase):
    def test_events_are_newest_first(self) -> None:
        self.assertEqual([e.date.day for e in state().events], [3, 2, 1])

    def test_quit_halts(self) -> None:
        s, effect = update(state(), Quit())
        self.assertEqual(effect, Halt())
        self.assertEqual(s, state())

    def test_scroll_saturates_at_zero(self) -> None:
        s, _ = run(state(), ScrollDown(), ScrollDown())
        self.assertEqual(s.scroll, 2 * SCROLL_STEP)
        s, _ = run(s, ScrollUp(), ScrollUp(), ScrollUp())
        self.assertEqual(s.scroll, 0)

    def test_cursor_is_clamped(self) -> None:
        s, _ = run(state(), CursorLeft())
        self.assertEqual(s.highlighted, FilterColumn.START_DATE)
        s, _ = run(s, *[CursorRight()] * 10)
        self.assertEqual(s.highlighted, FilterColumn.DESCRIPTION)

    def test_confirm_on_date_columns_asks_for_a_date(self) -> None:
        _, effect = update(state(), Confirm())
        self.assertEqual(effect, PromptDate(FilterColumn.START_DATE))
        _, effect = run(state(), CursorRight(), Confirm())
        self.assertEqual(effect, PromptDate(FilterColumn.END_DATE))

    def test_date_prompt_builds_the_right_filter(self) -> None:
        day = dt.date(2024, 1, 2)
        self.assertEqual(PromptDate(FilterColumn.START_DATE).to_filter(day), StartDateFilter(day))
        self.assertEqual(PromptDate(FilterColumn.END_DATE).to_filter(day), EndDateFilter(day))

    def test_confirm_on_category_offers_active_and_archived(self) -> None:
        _, effect = run(state(), CursorRight(), CursorRight(), Confirm())
        self.assertEqual(effect, PromptCategory(("Work", "Play", "Old")))

    def test_chosen_filter_is_applied(self) -> None:
        s, effect = update(state(), FilterChosen(CategoryFilter("Work")))
        self.assertIsNone(effect)
        self.assertEqual([e.date.day for e in s.visible_events()], [2, 1])
        self.assertEqual(s.totals().total, dt.timedelta(hours=2))

    def test_cancelled_prompt_changes_nothing(self) -> None:
        self.assertEqual(update(state(), PromptCancelled()), (state(), None))

    def test_description_filter_editing(self) -> None:
        s, effect = run(state(), *[CursorRight()] * 3, Confirm())
        self.assertIsNone(effect)
        self.assertEqual(s.editing, DescriptionFilter(""))

        s, _ = run(s, CharTyped("a"), CharTyped("l"), CharTyped("x"), Backspace())
        self.assertEqual(s.editing, DescriptionFilter("al"))
        # The filter under edit already narrows the view.
        self.assertEqual([e.description for e in s.visible_events()], ["alpha"])

        s, _ = update(s, Confirm())
        self.assertEqual(s.editing, DescriptionFilter("al"))

        s, _ = update(s, CommitFilter())
        self.assertIsNone(s.editing)
        self.assertEqual(s.applied, (DescriptionFilter("al"),))

    def test_cancel_discards_the_filter_under_edit(self) -> None:
        s, _ = run(state(), *[CursorRight()] * 3, Confirm(), CharTyped("z"), CancelFilter())
        self.assertIsNone(s.editing)
        self.assertEqual(s.applied, ())
        self.assertEqual(len(s.visible_events()), 3)

    def test_typing_outside_editing_is_ignored(self) -> None:
        s, _ = run(state(), CharTyped("a"), Backspace(), CommitFilter())
        self.assertEqual(s, state())

    def test_unknown_message_is_a_type_error(self) -> None:
        with self.assertRaises(TypeError):
            update(state(), object())  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main(verbosity=2)
