# taskit/commands.py
"""Interactive commands.

Each command looks at an already-loaded SaveData, asks its questions and
returns the intents to apply. None of them reads or writes the save file;
`taskit.store.run_command` does that around them.
"""

from __future__ import annotations

import datetime as dt
import logging
import time
from typing import Callable, List, Optional, Sequence, Tuple

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .delta import (
    AddCategory,
    AddEvent,
    AddTag,
    ArchiveCategory,
    ChangeEvent,
    DeltaItem,
    RenameCategory,
    SetDailyNote,
    TagCategory,
    resolve_reverse_index,
)
from .model import Event, SimpleTime, description_tags
from .prompts import Prompter
from .schema import SaveData
from .util.console import eprint
from .util.duration import format_clock

MAX_CATEGORY_ATTEMPTS = 3
STOPWATCH_TICK_S = 0.5

logger = logging.getLogger(__name__)

Clock = Callable[[], dt.datetime]


class CommandAborted(Exception):
    """The user declined something the command needs; nothing is saved."""


# --- Shared steps --------------------------------------------------------------

def ask_category(
    data: SaveData,
    ui: Prompter,
    *,
    default: str = "",
    refusal: str = "Cannot create event with nonexistent category.",
) -> Tuple[str, List[DeltaItem]]:
    """Ask for an active category, offering to create unknown ones.

    Gives up after MAX_CATEGORY_ATTEMPTS refusals.
    """
    for _ in range(MAX_CATEGORY_ATTEMPTS):
        name = ui.category("Select a category:", data.categories, default=default)
        if not name:
            eprint("Category must not be empty.")
            continue
        if name in data.categories:
            return name, []
        if name in data.archived_categories:
            eprint(f"Category {name} is archived.")
            continue
        if ui.confirm(f"Category {name} does not currently exist. Create it?"):
            return name, [AddCategory(name)]
        eprint(refusal)
    raise CommandAborted(f"no category chosen after {MAX_CATEGORY_ATTEMPTS} attempts")


def tag_intents(description: str, known_tags: Sequence[str], ui: Prompter) -> List[DeltaItem]:
    """AddTag intents for inline tags the registry does not know yet."""
    out: List[DeltaItem] = []
    seen = set(known_tags)
    for tag in description_tags(description):
        if tag in seen:
            continue
        if not ui.confirm(f"Tag #{tag} does not currently exist. Create it?"):
            raise CommandAborted(f"tag #{tag} was not created")
        out.append(AddTag(tag))
        seen.add(tag)
    return out


# --- Commands ------------------------------------------------------------------

def record(data: SaveData, ui: Prompter) -> List[DeltaItem]:
    date = ui.date("Date:", dt.date.today())
    start_time = ui.time("Start time:")
    category, delta = ask_category(data, ui)
    description = ui.description("Notes:", data.tags)
    end_time = ui.time("End time:")
    delta.extend(tag_intents(description, data.tags, ui))
    delta.append(AddEvent(Event(start_time, end_time, date, category, description)))
    return delta


def run_timer(
    start: dt.datetime,
    *,
    now: Clock = dt.datetime.now,
    console: Optional[Console] = None,
    inp: Optional[Input] = None,
    tick: float = STOPWATCH_TICK_S,
) -> bool:
    """Show elapsed time until Enter (True) or Ctrl-C (False)."""
    console = console or Console()
    inp = inp or create_input()
    with inp.raw_mode(), Live(Text(""), console=console, auto_refresh=False, transient=True) as live:
        while True:
            elapsed = SimpleTime.from_time(now().time()) - SimpleTime.from_time(start.time())
            live.update(Text(f"{format_clock(elapsed)} (<Enter> to finish)"), refresh=True)
            for kp in inp.read_keys():
                if kp.key == Keys.ControlC:
                    return False
                if kp.key in (Keys.ControlM, Keys.ControlJ):
                    return True
            time.sleep(tick)


def stopwatch(
    data: SaveData,
    ui: Prompter,
    *,
    now: Clock = dt.datetime.now,
    timer: Callable[..., bool] = run_timer,
) -> List[DeltaItem]:
    start = now()
    if not timer(start, now=now):
        logger.info("stopwatch cancelled")
        return []
    end = now()
    category, delta = ask_category(data, ui)
    description = ui.description("Notes:", data.tags)
    delta.extend(tag_intents(description, data.tags, ui))
    delta.append(
        AddEvent(
            Event(
                start_time=SimpleTime.from_time(start.time()),
                end_time=SimpleTime.from_time(end.time()),
                date=start.date(),
                category=category,
                description=description,
            )
        )
    )
    return delta


def amend(data: SaveData, ui: Prompter, reverse_index: int = 0) -> List[DeltaItem]:
    """Edit the event `reverse_index` places from the end (0 = most recent)."""
    index = resolve_reverse_index(data.events, reverse_index)
    old = data.events[index]

    date = ui.date("Date:", old.date)
    start_time = ui.time("Start time:", old.start_time)
    category, delta = ask_category(
        data,
        ui,
        default=old.category,
        refusal="Cannot update event with nonexistent category.",
    )
    description = ui.description("Notes:", data.tags, default=old.description)
    end_time = ui.time("End time:", old.end_time)

    delta.extend(tag_intents(description, data.tags, ui))
    new = Event(start_time, end_time, date, category, description)
    delta.append(ChangeEvent(index=index, event=new, expected=old))
    return delta


def amend_labels(events: Sequence[Event]) -> List[str]:
    """Newest first; position in the list is the reverse index."""
    return [f"({n + 1:02d}) {ev.label()}" for n, ev in enumerate(reversed(events))]


def dispatch_amend(data: SaveData, ui: Prompter) -> List[DeltaItem]:
    if not data.events:
        raise CommandAborted("there are no events to amend")
    reverse_index = ui.choose("Select event to modify:", amend_labels(data.events))
    return amend(data, ui, reverse_index)


def archive(data: SaveData, category: str) -> List[DeltaItem]:
    if category in data.categories:
        return [ArchiveCategory(category)]
    if category in data.archived_categories:
        raise CommandAborted(f"category {category} is already archived")
    raise CommandAborted(f"category {category} does not exist")


def tag(data: SaveData, ui: Prompter) -> List[DeltaItem]:
    delta: List[DeltaItem] = []
    category = ui.category("Select a category to tag:", data.categories, strict=True)
    name = ui.tag("Select a tag:", data.tags)
    if not name:
        raise CommandAborted("tag must not be empty")
    if name not in data.tags:
        if not ui.confirm(f"Tag #{name} does not currently exist. Create it?"):
            raise CommandAborted(f"tag #{name} was not created")
        delta.append(AddTag(name))
    delta.append(TagCategory(category, name))
    return delta


def note(data: SaveData, ui: Prompter) -> List[DeltaItem]:
    date = ui.date("Date:", dt.date.today())
    text = ui.note("Daily Note:", default=data.daily_notes.get(date, ""))
    return [SetDailyNote(date, text)]


def rename(data: SaveData, old: str, new: str) -> List[DeltaItem]:
    new = new.strip()
    if not new:
        raise CommandAborted("new category name must not be empty")
    if old not in data.categories and old not in data.archived_categories:
        raise CommandAborted(f"category {old} does not exist")
    return [RenameCategory(old, new)]


__all__ = [
    "CommandAborted",
    "MAX_CATEGORY_ATTEMPTS",
    "amend",
    "amend_labels",
    "archive",
    "ask_category",
    "dispatch_amend",
    "note",
    "record",
    "rename",
    "run_timer",
    "stopwatch",
    "tag",
    "tag_intents",
]
