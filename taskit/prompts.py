# taskit/prompts.py
"""Line-oriented prompts shared by the commands and the dashboard.

Every prompt raises KeyboardInterrupt (Ctrl-C) or EOFError (Ctrl-D) when the
user backs out; callers decide what cancelling means for them.
"""

from __future__ import annotations

import datetime as dt
from typing import Callable, Iterable, Optional, Sequence

from prompt_toolkit import prompt
from prompt_toolkit.completion import Completer, Completion, FuzzyCompleter, WordCompleter
from prompt_toolkit.document import Document
from prompt_toolkit.shortcuts import confirm as pt_confirm
from prompt_toolkit.validation import ValidationError, Validator

from .model import SimpleTime
from .util.timeparse import parse_date_loose


def strip_tag_marker(s: str) -> str:
    s = s.strip()
    return s[1:] if s.startswith("#") else s


class TagCompleter(Completer):
    """Completes a single tag name; suggestions are shown with a leading '#'."""

    def __init__(self, tags: Iterable[str]):
        self.tags = list(tags)

    def get_completions(self, document: Document, complete_event):
        text = document.text_before_cursor
        partial = strip_tag_marker(text)
        for tag in self.tags:
            if tag.startswith(partial):
                yield Completion("#" + tag, start_position=-len(text))


class DescriptionTagCompleter(Completer):
    """Completes the word being typed when it starts with '#'."""

    def __init__(self, tags: Iterable[str]):
        self.tags = list(tags)

    def get_completions(self, document: Document, complete_event):
        word = document.text_before_cursor.split(" ")[-1]
        if not word.startswith("#"):
            return
        partial = word[1:]
        for tag in self.tags:
            if tag.startswith(partial):
                yield Completion("#" + tag, start_position=-len(word))


class ParseValidator(Validator):
    """Accepts input that `parse` turns into a value without raising ValueError."""

    def __init__(self, parse: Callable[[str], object], *, allow_empty: bool = False):
        self.parse = parse
        self.allow_empty = allow_empty

    def validate(self, document: Document) -> None:
        text = document.text
        if self.allow_empty and not text.strip():
            return
        try:
            self.parse(text)
        except ValueError as e:
            raise ValidationError(message=str(e), cursor_position=len(text)) from e


def member_validator(names: Sequence[str], *, what: str = "value") -> Validator:
    allowed = set(names)
    return Validator.from_callable(
        lambda s: s in allowed,
        error_message=f"Unknown {what}",
        move_cursor_to_end=True,
    )


def names_completer(names: Iterable[str]) -> WordCompleter:
    return WordCompleter(list(names), sentence=True)


class Prompter:
    """prompt_toolkit-backed implementation of every question taskit asks."""

    def date(self, message: str, default: Optional[dt.date] = None) -> dt.date:
        raw = prompt(
            f"{message} ",
            default=default.isoformat() if default else "",
            validator=ParseValidator(parse_date_loose),
            validate_while_typing=False,
        )
        return parse_date_loose(raw)

    def time(self, message: str, default: Optional[SimpleTime] = None) -> SimpleTime:
        raw = prompt(
            f"{message} ",
            default=str(default) if default else "",
            validator=ParseValidator(SimpleTime.parse),
            validate_while_typing=False,
        )
        return SimpleTime.parse(raw)

    def category(
        self,
        message: str,
        choices: Sequence[str],
        *,
        default: str = "",
        strict: bool = False,
    ) -> str:
        raw = prompt(
            f"{message} ",
            default=default,
            completer=names_completer(choices),
            validator=member_validator(choices, what="category") if strict else None,
            validate_while_typing=False,
        )
        return raw.strip()

    def description(self, message: str, tags: Sequence[str], *, default: str = "") -> str:
        return prompt(
            f"{message} ",
            default=default,
            completer=DescriptionTagCompleter(tags),
            complete_while_typing=True,
        )

    def tag(self, message: str, tags: Sequence[str]) -> str:
        raw = prompt(f"{message} ", completer=TagCompleter(tags))
        return strip_tag_marker(raw)

    def confirm(self, message: str) -> bool:
        return bool(pt_confirm(message))

    def note(self, message: str, *, default: str = "") -> str:
        return prompt(
            f"{message} (Esc then Enter to save)\n",
            default=default,
            multiline=True,
        )

    def choose(self, message: str, labels: Sequence[str]) -> int:
        """Fuzzy pick one of `labels`; returns its position."""
        index = {label: i for i, label in enumerate(labels)}
        completer = FuzzyCompleter(WordCompleter(list(labels), sentence=True, match_middle=True))
        raw = prompt(
            f"{message} ",
            completer=completer,
            validator=member_validator(labels, what="entry"),
            validate_while_typing=False,
        )
        return index[raw]


__all__ = [
    "DescriptionTagCompleter",
    "ParseValidator",
    "Prompter",
    "TagCompleter",
    "member_validator",
    "names_completer",
    "strip_tag_marker",
]
