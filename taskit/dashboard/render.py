# taskit/dashboard/render.py
from __future__ import annotations

from typing import List

from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..aggregate import Aggregate, group_by_day
from ..filters import FilterColumn
from ..model import Event
from ..util.duration import format_duration
from .state import DashboardState

COLORS = {
    'primary': 'bright_cyan',
    'category': 'bold blue',
    'tag': 'bold magenta',
    'total': 'bold green',
    'duration': 'yellow',
    'muted': 'grey58',
    'note': 'italic dim cyan',
}

HEADER_WIDTH = 20


def header_row(state: DashboardState) -> Table:
    grid = Table.grid(padding=(0, 0))
    for _ in FilterColumn:
        grid.add_column(width=HEADER_WIDTH, no_wrap=True)
    cells = []
    for col in FilterColumn:
        style = "underline bold" if state.column == int(col) else ""
        cells.append(Text(col.title, style=style))
    grid.add_row(*cells)
    return grid


def filter_lines(state: DashboardState) -> List[Text]:
    lines = [Text(str(f)) for f in state.applied]
    if state.editing is not None:
        lines.append(Text(f"(*) {state.editing}", style=COLORS['primary']))
    return lines


def _event_lines(ev: Event) -> List[Text]:
    head = Text()
    head.append(f"{ev.start_time}-{ev.end_time} ", style="bold")
    head.append(format_duration(ev.duration), style="dim")
    body = Text()
    body.append(ev.category, style=COLORS['category'])
    body.append(" - ")
    body.append(ev.description)
    return [head, body, Text("")]


def event_lines(state: DashboardState) -> List[Text]:
    """Visible events grouped by day, before scrolling."""
    lines: List[Text] = []
    for group in group_by_day(state.visible_events()):
        day = Text("------ ")
        day.append(str(group.date), style="bold")
        day.append(" (")
        day.append(format_duration(group.total), style=COLORS['duration'])
        day.append(") ------")
        lines.append(day)
        note = state.daily_notes.get(group.date)
        if note:
            lines.append(Text(f"[{note}]", style=COLORS['note']))
        for ev in group.events:
            lines.extend(_event_lines(ev))
    return lines


def aggregate_lines(totals: Aggregate) -> List[Text]:
    lines = [Text("Aggregated durations", style="bold underline")]
    all_line = Text()
    all_line.append("all", style=COLORS['total'])
    all_line.append(f": {format_duration(totals.total)}")
    lines.append(all_line)
    for cat, dur in totals.by_category.items():
        t = Text()
        t.append(cat, style=COLORS['category'])
        t.append(f": {format_duration(dur)}")
        lines.append(t)
    lines.append(Text(""))
    for tag, dur in totals.by_tag.items():
        t = Text()
        t.append(tag, style=COLORS['tag'])
        t.append(f": {format_duration(dur)}")
        lines.append(t)
    return lines


def _panel(lines: List[Text], **kw) -> Panel:
    return Panel(Text("\n").join(lines), **kw)


def render(state: DashboardState) -> Layout:
    layout = Layout(name="root")
    layout.split_column(
        Layout(header_row(state), name="header", size=1),
        Layout(name="body"),
    )
    events = event_lines(state)[state.scroll:]
    layout["body"].split_row(
        Layout(_panel(filter_lines(state), title="Filters", border_style=COLORS['muted']), name="filters"),
        Layout(_panel(events, title="Events", border_style=COLORS['primary']), name="events"),
        Layout(_panel(aggregate_lines(state.totals()), title="Totals", border_style=COLORS['muted']), name="totals"),
    )
    return layout
