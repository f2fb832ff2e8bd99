# taskit/schema.py
"""Versioned save-file schema.

Every revision of the on-disk shape is its own frozen dataclass. A save file
is a JSON object carrying an integer ``schema_version`` tag plus that
revision's fields; the tag (never the set of present keys) decides which
class is built.

When the shape changes:
  - add a new SaveDataVN class with SCHEMA_VERSION = N
  - give the previous latest an ``upgrade()`` returning the new class
  - register it in _REVISIONS and bump LATEST_SCHEMA_VERSION
  - point the SaveData alias at it
"""

from __future__ import annotations

import datetime as dt
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple, Type, Union

from .model import Event

LATEST_SCHEMA_VERSION = 4
SCHEMA_VERSION_KEY = "schema_version"
_WRAPPED_TAG_RE = re.compile(r"^V([1-9][0-9]*)$")


class SaveDataFormatError(ValueError):
    """Raised when a save file cannot be parsed into a known revision."""


class SchemaChainError(RuntimeError):
    """The upgrade chain ended on something other than the latest revision.

    This is a defect in the chain itself, not bad input; callers should not
    try to recover from it.
    """


TagMap = Dict[str, Tuple[str, ...]]


# --- Field codecs --------------------------------------------------------------

def _names(raw: Any, *, label: str) -> Tuple[str, ...]:
    # Older files wrapped name lists as {"options": [...]}.
    if isinstance(raw, dict) and "options" in raw:
        raw = raw.get("options")
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise SaveDataFormatError(f"{label} must be a list of strings")
    return tuple(raw)


def _events(raw: Any) -> Tuple[Event, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise SaveDataFormatError("events must be a list")
    out: List[Event] = []
    for i, ev in enumerate(raw):
        try:
            out.append(Event.from_json(ev))
        except ValueError as e:
            raise SaveDataFormatError(f"events[{i}]: {e}") from e
    return tuple(out)


def _tag_map(raw: Any) -> TagMap:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SaveDataFormatError("tag_map must be an object")
    out: TagMap = {}
    for cat, tags in raw.items():
        out[str(cat)] = _names(tags, label=f"tag_map[{cat!r}]")
    return out


def _daily_notes(raw: Any) -> Dict[dt.date, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SaveDataFormatError("daily_notes must be an object")
    out: Dict[dt.date, str] = {}
    for k, v in raw.items():
        try:
            day = dt.date.fromisoformat(str(k))
        except ValueError as e:
            raise SaveDataFormatError(f"daily_notes key is not a date: {k!r}") from e
        if not isinstance(v, str):
            raise SaveDataFormatError(f"daily_notes[{k}] must be a string")
        out[day] = v
    return out


def _tag_map_json(tag_map: TagMap) -> Dict[str, List[str]]:
    return {cat: list(tags) for cat, tags in tag_map.items()}


def _daily_notes_json(notes: Mapping[dt.date, str]) -> Dict[str, str]:
    return {day.isoformat(): text for day, text in sorted(notes.items())}


# --- Revisions -----------------------------------------------------------------

@dataclass(frozen=True)
class SaveDataV1:
    SCHEMA_VERSION = 1

    categories: Tuple[str, ...] = ()
    events: Tuple[Event, ...] = ()

    def upgrade(self) -> "SaveDataV2":
        return SaveDataV2(
            categories=self.categories,
            archived_categories=(),
            events=self.events,
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "categories": list(self.categories),
            "events": [e.to_json() for e in self.events],
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "SaveDataV1":
        return cls(
            categories=_names(obj.get("categories"), label="categories"),
            events=_events(obj.get("events")),
        )


@dataclass(frozen=True)
class SaveDataV2:
    SCHEMA_VERSION = 2

    categories: Tuple[str, ...] = ()
    archived_categories: Tuple[str, ...] = ()
    events: Tuple[Event, ...] = ()

    def upgrade(self) -> "SaveDataV3":
        return SaveDataV3(
            categories=self.categories,
            archived_categories=self.archived_categories,
            tags=(),
            tag_map={},
            events=self.events,
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "categories": list(self.categories),
            "archived_categories": list(self.archived_categories),
            "events": [e.to_json() for e in self.events],
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "SaveDataV2":
        return cls(
            categories=_names(obj.get("categories"), label="categories"),
            archived_categories=_names(obj.get("archived_categories"), label="archived_categories"),
            events=_events(obj.get("events")),
        )


@dataclass(frozen=True)
class SaveDataV3:
    SCHEMA_VERSION = 3

    categories: Tuple[str, ...] = ()
    archived_categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    tag_map: TagMap = field(default_factory=dict)  # category name -> tag names
    events: Tuple[Event, ...] = ()

    def upgrade(self) -> "SaveDataV4":
        return SaveDataV4(
            categories=self.categories,
            archived_categories=self.archived_categories,
            tags=self.tags,
            tag_map=dict(self.tag_map),
            events=self.events,
            daily_notes={},
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "categories": list(self.categories),
            "archived_categories": list(self.archived_categories),
            "tags": list(self.tags),
            "tag_map": _tag_map_json(self.tag_map),
            "events": [e.to_json() for e in self.events],
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "SaveDataV3":
        return cls(
            categories=_names(obj.get("categories"), label="categories"),
            archived_categories=_names(obj.get("archived_categories"), label="archived_categories"),
            tags=_names(obj.get("tags"), label="tags"),
            tag_map=_tag_map(obj.get("tag_map")),
            events=_events(obj.get("events")),
        )


@dataclass(frozen=True)
class SaveDataV4:
    SCHEMA_VERSION = 4

    categories: Tuple[str, ...] = ()
    archived_categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    tag_map: TagMap = field(default_factory=dict)  # category name -> tag names
    events: Tuple[Event, ...] = ()
    daily_notes: Dict[dt.date, str] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            "categories": list(self.categories),
            "archived_categories": list(self.archived_categories),
            "tags": list(self.tags),
            "tag_map": _tag_map_json(self.tag_map),
            "events": [e.to_json() for e in self.events],
            "daily_notes": _daily_notes_json(self.daily_notes),
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "SaveDataV4":
        return cls(
            categories=_names(obj.get("categories"), label="categories"),
            archived_categories=_names(obj.get("archived_categories"), label="archived_categories"),
            tags=_names(obj.get("tags"), label="tags"),
            tag_map=_tag_map(obj.get("tag_map")),
            events=_events(obj.get("events")),
            daily_notes=_daily_notes(obj.get("daily_notes")),
        )


SaveData = SaveDataV4
SaveDataVersioned = Union[SaveDataV1, SaveDataV2, SaveDataV3, SaveDataV4]

_REVISIONS: Dict[int, Type[Any]] = {
    1: SaveDataV1,
    2: SaveDataV2,
    3: SaveDataV3,
    4: SaveDataV4,
}


def empty_save_data() -> SaveData:
    return SaveDataV4()


def schema_version_of(data: SaveDataVersioned) -> int:
    return int(type(data).SCHEMA_VERSION)


# --- Codec ---------------------------------------------------------------------

def load(raw: Union[bytes, str]) -> SaveDataVersioned:
    """Parse a save document into the revision named by its tag.

    The tag is either the `schema_version` key or, for files from early
    builds, a single `"V<n>"` key wrapping the whole body.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SaveDataFormatError(f"save file is not UTF-8: {e}") from e
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SaveDataFormatError(f"save file is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise SaveDataFormatError(f"save file must hold an object; got {type(obj).__name__}")

    version = obj.get(SCHEMA_VERSION_KEY)
    if version is None and len(obj) == 1:
        # Early builds wrote the body under its revision name: {"V1": {...}}.
        ((tag, body),) = obj.items()
        m = _WRAPPED_TAG_RE.match(str(tag))
        if m and isinstance(body, dict):
            version, obj = int(m.group(1)), body
    if isinstance(version, bool) or not isinstance(version, int):
        raise SaveDataFormatError(f"save file is missing an integer {SCHEMA_VERSION_KEY}")
    cls = _REVISIONS.get(version)
    if cls is None:
        raise SaveDataFormatError(
            f"Unsupported {SCHEMA_VERSION_KEY}: {version} (latest={LATEST_SCHEMA_VERSION})"
        )
    return cls.from_json(obj)


def to_document(data: SaveDataVersioned) -> Dict[str, Any]:
    doc: Dict[str, Any] = {SCHEMA_VERSION_KEY: schema_version_of(data)}
    doc.update(data.to_json())
    return doc


def dump(data: SaveDataVersioned, *, pretty: bool = False) -> str:
    return json.dumps(to_document(data), ensure_ascii=False, indent=2 if pretty else None)


# --- Upgrader ------------------------------------------------------------------

def upgrade_once(data: SaveDataVersioned) -> SaveDataVersioned:
    """Move one revision forward. Never downgrades."""
    if isinstance(data, SaveDataV4):
        raise SchemaChainError("SaveDataV4 is the latest revision; nothing to upgrade")
    return data.upgrade()


def extract(data: SaveDataVersioned) -> Tuple[SaveData, bool]:
    """Return the latest revision of `data` and whether any upgrade step ran."""
    if isinstance(data, SaveDataV4):
        return data, False

    cur: Any = data
    steps = 0
    while not isinstance(cur, SaveDataV4) and steps < LATEST_SCHEMA_VERSION - 1:
        cur = upgrade_once(cur)
        steps += 1

    if not isinstance(cur, SaveDataV4):
        raise SchemaChainError(
            f"upgrade chain stopped at {type(cur).__name__} after {steps} steps"
        )
    return cur, True


__all__ = [
    "LATEST_SCHEMA_VERSION",
    "SaveData",
    "SaveDataV1",
    "SaveDataV2",
    "SaveDataV3",
    "SaveDataV4",
    "SaveDataVersioned",
    "SaveDataFormatError",
    "SchemaChainError",
    "dump",
    "empty_save_data",
    "extract",
    "load",
    "schema_version_of",
    "to_document",
    "upgrade_once",
]
