from __future__ import annotations

import datetime as dt
import itertools
import unittest

from taskit.aggregate import aggregate, category_totals, group_by_day, newest_first, tag_totals
from taskit.filters import (
    CategoryFilter,
    DescriptionFilter,
    EndDateFilter,
    FilterColumn,
    StartDateFilter,
    active_filters,
    apply_filters,
)
from taskit.model import Event, SimpleTime

H = dt.timedelta(hours=1)


def ev(day: int, category: str, description: str = "", hours: int = 1, start: int = 9) -> Event:
    return Event(
        SimpleTime.of(start, 0),
        SimpleTime.of((start + hours) % 24, 0),
        dt.date(2024, 1, day),
        category,
        description,
    )


EVENTS = [
    ev(1, "Work", "Write docs #writing"),
    ev(2, "Work", "review", hours=2),
    ev(3, "Play", "chess"),
    ev(4, "Old", "legacy Docs"),
    ev(5, "Work", "more docs", hours=3),
]


class TestFilterContract(unittest.TestCase):
    def test_date_bounds_are_inclusive(self) -> None:
        out = apply_filters(EVENTS, [StartDateFilter(dt.date(2024, 1, 2)), EndDateFilter(dt.date(2024, 1, 4))])
        self.assertEqual([e.date.day for e in out], [2, 3, 4])

    def test_category_is_exact(self) -> None:
        self.assertEqual(len(apply_filters(EVENTS, [CategoryFilter("Work")])), 3)
        self.assertEqual(apply_filters(EVENTS, [CategoryFilter("work")]), [])

    def test_description_is_case_sensitive_substring(self) -> None:
        out = apply_filters(EVENTS, [DescriptionFilter("docs")])
        self.assertEqual([e.date.day for e in out], [1, 5])
        self.assertEqual(apply_filters(EVENTS, [DescriptionFilter("")]), EVENTS)

    def test_filters_are_anded_in_any_order(self) -> None:
        filters = [
            StartDateFilter(dt.date(2024, 1, 2)),
            CategoryFilter("Work"),
            DescriptionFilter("docs"),
        ]
        expected = [EVENTS[4]]
        for perm in itertools.permutations(filters):
            with self.subTest(order=[type(f).__name__ for f in perm]):
                self.assertEqual(apply_filters(EVENTS, list(perm)), expected)

    def test_filter_under_edit_participates(self) -> None:
        out = apply_filters(EVENTS, [CategoryFilter("Work")], DescriptionFilter("rev"))
        self.assertEqual(out, [EVENTS[1]])
        self.assertEqual(len(active_filters([CategoryFilter("Work")], None)), 1)

    def test_labels(self) -> None:
        self.assertEqual(str(StartDateFilter(dt.date(2024, 1, 2))), "At/After: 2024-01-02")
        self.assertEqual(str(EndDateFilter(dt.date(2024, 1, 2))), "At/Before: 2024-01-02")
        self.assertEqual(str(CategoryFilter("Work")), "Category: Work")
        self.assertEqual(str(DescriptionFilter("ab")), "Description contains: ab")

    def test_description_editing(self) -> None:
        f = DescriptionFilter().append("a").append("b").backspace()
        self.assertEqual(f, DescriptionFilter("a"))
        self.assertEqual(DescriptionFilter().backspace(), DescriptionFilter(""))

    def test_columns(self) -> None:
        self.assertEqual([c.title for c in FilterColumn], ["Start Date", "End Date", "Category", "Description"])


class TestAggregateContract(unittest.TestCase):
    def test_unused_active_categories_default_to_zero(self) -> None:
        totals = category_totals([], ["Work", "Play"])
        self.assertEqual(totals, {"Play": dt.timedelta(0), "Work": dt.timedelta(0)})

    def test_other_categories_with_events_are_counted(self) -> None:
        totals = category_totals(EVENTS, ["Work", "Play", "Idle"])
        self.assertEqual(list(totals), ["Idle", "Old", "Play", "Work"])
        self.assertEqual(totals["Work"], 6 * H)
        self.assertEqual(totals["Old"], H)
        self.assertEqual(totals["Idle"], dt.timedelta(0))

    def test_category_totals_sum_to_total(self) -> None:
        agg = aggregate(EVENTS, ["Work", "Play"], [], {})
        self.assertEqual(agg.total, 8 * H)
        self.assertEqual(sum(agg.by_category.values(), dt.timedelta(0)), agg.total)

    def test_tag_totals_follow_the_map(self) -> None:
        by_cat = {"Play": H, "Work": 6 * H}
        tags = tag_totals(by_cat, ["fun", "busy", "unused"], {"Work": ["busy"], "Play": ["fun", "busy"]})
        self.assertEqual(tags, {"busy": 7 * H, "fun": H, "unused": dt.timedelta(0)})

    def test_overnight_event(self) -> None:
        agg = aggregate([ev(1, "Sleep", start=23, hours=8)], ["Sleep"], [], {})
        self.assertEqual(agg.total, 8 * H)

    def test_filtered_aggregate(self) -> None:
        visible = apply_filters(EVENTS, [CategoryFilter("Play")])
        agg = aggregate(visible, ["Work", "Play"], [], {})
        self.assertEqual(agg.by_category, {"Play": H, "Work": dt.timedelta(0)})

    def test_newest_first_and_day_groups(self) -> None:
        a = ev(1, "Work", start=8)
        b = ev(1, "Work", start=12)
        c = ev(2, "Work", start=7)
        ordered = newest_first([a, c, b])
        self.assertEqual(ordered, [c, b, a])
        groups = group_by_day(ordered)
        self.assertEqual([g.date.day for g in groups], [2, 1])
        self.assertEqual(groups[1].events, (b, a))
        self.assertEqual(groups[1].total, 2 * H)
        self.assertEqual(group_by_day([]), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
