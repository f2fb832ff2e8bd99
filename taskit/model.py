# taskit/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .util.duration import MINUTES_PER_DAY
from .util.timeparse import parse_hhmm


@dataclass(frozen=True, order=True)
class SimpleTime:
    """Time of day with minute resolution.

    Build through `try_new` / `of` / `parse`; the constructor itself does not
    validate, so direct construction is reserved for this module.
    """

    hour: int
    minute: int

    @classmethod
    def try_new(cls, hour: int, minute: int) -> Optional["SimpleTime"]:
        if isinstance(hour, bool) or isinstance(minute, bool):
            return None
        if not isinstance(hour, int) or not isinstance(minute, int):
            return None
        if 0 <= hour < 24 and 0 <= minute < 60:
            return cls(hour, minute)
        return None

    @classmethod
    def of(cls, hour: int, minute: int) -> "SimpleTime":
        t = cls.try_new(hour, minute)
        if t is None:
            raise ValueError(f"Invalid time of day: {hour!r}:{minute!r}")
        return t

    @classmethod
    def parse(cls, s: str) -> "SimpleTime":
        hh, mm = parse_hhmm(s)
        return cls.of(hh, mm)

    @classmethod
    def from_time(cls, t: dt.time) -> "SimpleTime":
        return cls.of(t.hour, t.minute)

    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def __sub__(self, other: "SimpleTime") -> dt.timedelta:
        # 01:00 - 23:00 is 2h: a negative difference means the span crossed midnight.
        if not isinstance(other, SimpleTime):
            return NotImplemented
        minutes = self.minute_of_day() - other.minute_of_day()
        if minutes < 0:
            minutes += MINUTES_PER_DAY
        return dt.timedelta(minutes=minutes)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def to_json(self) -> Dict[str, int]:
        return {"hour": self.hour, "minute": self.minute}

    @classmethod
    def from_json(cls, raw: Any) -> "SimpleTime":
        if isinstance(raw, str):
            return cls.parse(raw)
        if isinstance(raw, dict):
            t = cls.try_new(raw.get("hour"), raw.get("minute"))  # type: ignore[arg-type]
            if t is not None:
                return t
        raise ValueError(f"Invalid time value: {raw!r}")


def description_tags(description: str) -> Tuple[str, ...]:
    """Inline tag markers: space-separated words starting with '#', without the '#'."""
    out = []
    for word in (description or "").split(" "):
        if word.startswith("#") and len(word) > 1:
            out.append(word[1:])
    return tuple(out)


@dataclass(frozen=True)
class Event:
    start_time: SimpleTime
    end_time: SimpleTime  # earlier than start_time: ends on the following day
    date: dt.date
    category: str
    description: str = ""

    @property
    def tags(self) -> Tuple[str, ...]:
        return description_tags(self.description)

    @property
    def duration(self) -> dt.timedelta:
        return self.end_time - self.start_time

    def sort_key(self) -> Tuple[dt.date, SimpleTime]:
        return (self.date, self.start_time)

    def label(self) -> str:
        return f"{self.date} {self.start_time}-{self.end_time} {self.category} - {self.description}"

    def to_json(self) -> Dict[str, Any]:
        return {
            "start_time": self.start_time.to_json(),
            "end_time": self.end_time.to_json(),
            "date": self.date.isoformat(),
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_json(cls, raw: Any) -> "Event":
        if not isinstance(raw, dict):
            raise ValueError(f"event must be an object; got {type(raw).__name__}")
        category = raw.get("category")
        if not isinstance(category, str):
            raise ValueError("event.category must be a string")
        # Early builds stored the free text under "comments".
        desc = raw.get("description", raw.get("comments", ""))
        if desc is None:
            desc = ""
        if not isinstance(desc, str):
            raise ValueError("event.description must be a string")
        date_raw = raw.get("date")
        if not isinstance(date_raw, str):
            raise ValueError("event.date must be a YYYY-MM-DD string")
        return cls(
            start_time=SimpleTime.from_json(raw.get("start_time")),
            end_time=SimpleTime.from_json(raw.get("end_time")),
            date=dt.date.fromisoformat(date_raw),
            category=category,
            description=desc,
        )


__all__ = [
    "SimpleTime",
    "Event",
    "description_tags",
]
