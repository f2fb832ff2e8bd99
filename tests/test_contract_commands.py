from __future__ import annotations

import datetime as dt
import unittest

from taskit import commands
from taskit.commands import CommandAborted
from taskit.delta import (
    AddCategory,
    AddEvent,
    AddTag,
    ArchiveCategory,
    ChangeEvent,
    EventIndexError,
    RenameCategory,
    SetDailyNote,
    TagCategory,
)
from taskit.model import Event, SimpleTime
from taskit.schema import SaveData

DAY = dt.date(2024, 1, 1)


def t(s: str) -> SimpleTime:
    return SimpleTime.parse(s)


class ScriptedPrompter:
    """Answers prompts from per-kind queues and records what was asked."""

    def __init__(self, **answers):
        self.answers = {k: list(v) for k, v in answers.items()}
        self.asked = []

    def _next(self, kind, message):
        self.asked.append((kind, message))
        queue = self.answers.get(kind)
        if not queue:
            raise AssertionError(f"unexpected {kind} prompt: {message}")
        value = queue.pop(0)
        if isinstance(value, BaseException):
            raise value
        return value

    def date(self, message, default=None):
        return self._next("date", message)

    def time(self, message, default=None):
        return self._next("time", message)

    def category(self, message, choices, *, default="", strict=False):
        return self._next("category", message)

    def description(self, message, tags, *, default=""):
        return self._next("description", message)

    def tag(self, message, tags):
        return self._next("tag", message)

    def confirm(self, message):
        return self._next("confirm", message)

    def note(self, message, *, default=""):
        return self._next("note", message)

    def choose(self, message, labels):
        self.labels = list(labels)
        return self._next("choose", message)


def data(**kw) -> SaveData:
    base = dict(categories=("Work",), archived_categories=("Old",), tags=("focus",))
    base.update(kw)
    return SaveData(**base)


class TestAskCategoryContract(unittest.TestCase):
    def test_known_category(self) -> None:
        ui = ScriptedPrompter(category=["Work"])
        self.assertEqual(commands.ask_category(data(), ui), ("Work", []))

    def test_new_category_is_created_on_confirm(self) -> None:
        ui = ScriptedPrompter(category=["Play"], confirm=[True])
        self.assertEqual(commands.ask_category(data(), ui), ("Play", [AddCategory("Play")]))

    def test_retries_then_gives_up(self) -> None:
        ui = ScriptedPrompter(category=["", "Old", "Nope"], confirm=[False])
        with self.assertRaises(CommandAborted):
            commands.ask_category(data(), ui)
        self.assertEqual(sum(1 for kind, _ in ui.asked if kind == "category"), commands.MAX_CATEGORY_ATTEMPTS)

    def test_retry_can_succeed(self) -> None:
        ui = ScriptedPrompter(category=["Old", "Work"])
        self.assertEqual(commands.ask_category(data(), ui), ("Work", []))


class TestRecordContract(unittest.TestCase):
    def test_record_asks_in_order(self) -> None:
        ui = ScriptedPrompter(
            date=[DAY],
            time=[t("09:00"), t("17:30")],
            category=["Work"],
            description=["ship #focus"],
        )
        out = commands.record(data(), ui)
        self.assertEqual(out, [AddEvent(Event(t("09:00"), t("17:30"), DAY, "Work", "ship #focus"))])
        self.assertEqual(
            [kind for kind, _ in ui.asked],
            ["date", "time", "category", "description", "time"],
        )

    def test_record_creates_category_and_tags(self) -> None:
        ui = ScriptedPrompter(
            date=[DAY],
            time=[t("22:00"), t("06:00")],
            category=["Sleep"],
            description=["#rest #rest well"],
            confirm=[True, True],
        )
        out = commands.record(data(), ui)
        self.assertEqual(out[:2], [AddCategory("Sleep"), AddTag("rest")])
        self.assertEqual(out[2].event.duration, dt.timedelta(hours=8))

    def test_declined_tag_aborts(self) -> None:
        ui = ScriptedPrompter(
            date=[DAY],
            time=[t("09:00"), t("10:00")],
            category=["Work"],
            description=["#newtag"],
            confirm=[False],
        )
        with self.assertRaises(CommandAborted):
            commands.record(data(), ui)

    def test_interrupt_propagates(self) -> None:
        ui = ScriptedPrompter(date=[KeyboardInterrupt()])
        with self.assertRaises(KeyboardInterrupt):
            commands.record(data(), ui)


class TestStopwatchContract(unittest.TestCase):
    def test_timer_span_becomes_event(self) -> None:
        clock = iter([dt.datetime(2024, 1, 1, 23, 50), dt.datetime(2024, 1, 2, 0, 20)])
        ui = ScriptedPrompter(category=["Work"], description=[""])
        out = commands.stopwatch(data(), ui, now=lambda: next(clock), timer=lambda start, now: True)
        ev = out[-1].event
        self.assertEqual((ev.start_time, ev.end_time, ev.date), (t("23:50"), t("00:20"), DAY))
        self.assertEqual(ev.duration, dt.timedelta(minutes=30))

    def test_cancelled_timer_records_nothing(self) -> None:
        ui = ScriptedPrompter()
        out = commands.stopwatch(data(), ui, now=lambda: dt.datetime(2024, 1, 1, 9), timer=lambda start, now: False)
        self.assertEqual(out, [])
        self.assertEqual(ui.asked, [])


class TestAmendContract(unittest.TestCase):
    def setUp(self) -> None:
        self.events = tuple(Event(t("09:00"), t("10:00"), DAY + dt.timedelta(days=i), "Work", f"e{i}") for i in range(3))

    def test_amend_latest(self) -> None:
        ui = ScriptedPrompter(
            date=[self.events[2].date],
            time=[t("09:00"), t("11:00")],
            category=["Work"],
            description=["e2 fixed"],
        )
        out = commands.amend(data(events=self.events), ui)
        new = Event(t("09:00"), t("11:00"), self.events[2].date, "Work", "e2 fixed")
        self.assertEqual(out, [ChangeEvent(index=2, event=new, expected=self.events[2])])

    def test_amend_by_reverse_index(self) -> None:
        ui = ScriptedPrompter(
            date=[DAY],
            time=[t("08:00"), t("10:00")],
            category=["Work"],
            description=["e0"],
        )
        out = commands.amend(data(events=self.events), ui, reverse_index=2)
        self.assertEqual(out[-1].index, 0)
        self.assertEqual(out[-1].expected, self.events[0])

    def test_amend_out_of_range(self) -> None:
        with self.assertRaises(EventIndexError):
            commands.amend(data(events=self.events), ScriptedPrompter(), reverse_index=3)

    def test_labels_are_newest_first(self) -> None:
        labels = commands.amend_labels(self.events)
        self.assertTrue(labels[0].startswith("(01) 2024-01-03"))
        self.assertTrue(labels[2].startswith("(03) 2024-01-01"))

    def test_dispatch_uses_chosen_entry(self) -> None:
        ui = ScriptedPrompter(
            choose=[1],
            date=[self.events[1].date],
            time=[t("09:00"), t("10:00")],
            category=["Work"],
            description=["e1"],
        )
        out = commands.dispatch_amend(data(events=self.events), ui)
        self.assertEqual(out[-1].index, 1)
        self.assertEqual(len(ui.labels), 3)

    def test_dispatch_without_events(self) -> None:
        with self.assertRaises(CommandAborted):
            commands.dispatch_amend(data(), ScriptedPrompter())


class TestRegistryCommandsContract(unittest.TestCase):
    def test_archive(self) -> None:
        self.assertEqual(commands.archive(data(), "Work"), [ArchiveCategory("Work")])
        for name in ("Old", "Nope"):
            with self.assertRaises(CommandAborted):
                commands.archive(data(), name)

    def test_tag_existing(self) -> None:
        ui = ScriptedPrompter(category=["Work"], tag=["focus"])
        self.assertEqual(commands.tag(data(), ui), [TagCategory("Work", "focus")])

    def test_tag_new(self) -> None:
        ui = ScriptedPrompter(category=["Work"], tag=["deep"], confirm=[True])
        self.assertEqual(commands.tag(data(), ui), [AddTag("deep"), TagCategory("Work", "deep")])

    def test_tag_declined(self) -> None:
        ui = ScriptedPrompter(category=["Work"], tag=["deep"], confirm=[False])
        with self.assertRaises(CommandAborted):
            commands.tag(data(), ui)

    def test_note(self) -> None:
        ui = ScriptedPrompter(date=[DAY], note=["long day"])
        self.assertEqual(commands.note(data(), ui), [SetDailyNote(DAY, "long day")])

    def test_rename(self) -> None:
        self.assertEqual(commands.rename(data(), "Old", " Older "), [RenameCategory("Old", "Older")])
        with self.assertRaises(CommandAborted):
            commands.rename(data(), "Nope", "X")
        with self.assertRaises(CommandAborted):
            commands.rename(data(), "Work", "  ")


if __name__ == "__main__":
    unittest.main(verbosity=2)
