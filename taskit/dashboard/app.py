# taskit/dashboard/app.py
"""Terminal driver for the dashboard.

One thread: draw, poll the terminal for key presses (sleeping briefly when
there are none), turn each key into a message, run it through `update`,
repeat. A secondary prompt needs the terminal back in cooked mode, so the
driver leaves the live screen and raw mode entirely, runs the prompt, then
starts a fresh live screen, which redraws everything.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Tuple

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys
from rich.console import Console
from rich.live import Live

from ..filters import FilterColumn
from ..prompts import Prompter
from ..schema import SaveData
from .render import render
from .state import (
    Backspace,
    CancelFilter,
    CharTyped,
    CommitFilter,
    Confirm,
    CursorLeft,
    CursorRight,
    DashboardState,
    Effect,
    FilterChosen,
    Halt,
    Message,
    PromptCancelled,
    PromptCategory,
    PromptDate,
    Quit,
    ScrollDown,
    ScrollUp,
    update,
)

POLL_INTERVAL_S = 0.05

logger = logging.getLogger(__name__)

PromptRunner = Callable[[Effect], Message]

_ENTER_KEYS = (Keys.ControlM, Keys.ControlJ)


def _typed_char(kp: KeyPress) -> Optional[str]:
    k = kp.key
    if isinstance(k, Keys):
        return None
    if isinstance(k, str) and len(k) == 1 and k.isprintable():
        return k
    return None


def key_to_message(state: DashboardState, kp: KeyPress) -> Optional[Message]:
    """Map one key press to a message; None for keys with no meaning in this state."""
    k = kp.key
    if k == Keys.ControlC:
        return Quit()
    if k == Keys.Down:
        return ScrollDown()
    if k == Keys.Up:
        return ScrollUp()

    if state.editing is not None:
        if k == Keys.ControlH:
            return Backspace()
        if k in _ENTER_KEYS:
            return CommitFilter()
        if k == Keys.Escape:
            return CancelFilter()
        ch = _typed_char(kp)
        return CharTyped(ch) if ch is not None else None

    if _typed_char(kp) == "q":
        return Quit()
    if k == Keys.Left:
        return CursorLeft()
    if k == Keys.Right:
        return CursorRight()
    if k in _ENTER_KEYS:
        return Confirm()
    return None


def run_secondary_prompt(effect: Effect, prompter: Optional[Prompter] = None) -> Message:
    """Ask for a filter value with a full-screen-compatible line prompt."""
    ui = prompter or Prompter()
    try:
        if isinstance(effect, PromptDate):
            label = "Start date filter:" if effect.column == FilterColumn.START_DATE else "End date filter:"
            return FilterChosen(effect.to_filter(ui.date(label)))
        if isinstance(effect, PromptCategory):
            category = ui.category("Select a category:", effect.choices, strict=True)
            return FilterChosen(effect.to_filter(category))
    except (KeyboardInterrupt, EOFError):
        return PromptCancelled()
    raise TypeError(f"not a prompt effect: {type(effect).__name__}")


def wait_for_keys(inp: Input, *, poll_interval: float = POLL_INTERVAL_S) -> List[KeyPress]:
    while True:
        keys = inp.read_keys()
        if not keys:
            # A lone Escape stays buffered until flushed.
            keys = inp.flush_keys()
        if keys:
            return keys
        time.sleep(poll_interval)


def _live_phase(
    state: DashboardState,
    console: Console,
    inp: Input,
    pending: List[KeyPress],
) -> Tuple[DashboardState, Effect, List[KeyPress]]:
    """Feed keys to `update` until one yields an effect.

    Keys read in the same batch after that one are handed back so the next
    phase sees them in order.
    """
    with inp.raw_mode(), Live(render(state), console=console, screen=True, auto_refresh=False) as live:
        keys = pending
        while True:
            while keys:
                kp, keys = keys[0], keys[1:]
                msg = key_to_message(state, kp)
                if msg is None:
                    continue
                state, effect = update(state, msg)
                if effect is not None:
                    return state, effect, keys
            live.update(render(state), refresh=True)
            keys = wait_for_keys(inp)


def run_dashboard(
    data: SaveData,
    *,
    console: Optional[Console] = None,
    inp: Optional[Input] = None,
    prompt_runner: Optional[PromptRunner] = None,
) -> DashboardState:
    """Run the read-only dashboard until the user quits; returns the final state."""
    state = DashboardState.from_save_data(data)
    console = console or Console()
    inp = inp or create_input()
    run_prompt = prompt_runner or run_secondary_prompt

    pending: List[KeyPress] = []
    while True:
        state, effect, pending = _live_phase(state, console, inp, pending)
        if isinstance(effect, Halt):
            logger.debug("dashboard halted")
            return state
        logger.debug("dashboard suspended for %s", type(effect).__name__)
        state, _ = update(state, run_prompt(effect))
