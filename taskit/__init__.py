"""taskit: a journal of timed activities.

Public API: the names in __all__ below. Submodules hold the details.
"""

from __future__ import annotations

__version__ = "0.4.0"

from .aggregate import Aggregate, aggregate
from .delta import (
    AddCategory,
    AddEvent,
    AddTag,
    ArchiveCategory,
    ChangeEvent,
    DeltaItem,
    EventIndexError,
    RenameCategory,
    SetDailyNote,
    StaleEventError,
    TagCategory,
    apply,
)
from .filters import (
    CategoryFilter,
    DescriptionFilter,
    EndDateFilter,
    StartDateFilter,
    apply_filters,
)
from .model import Event, SimpleTime
from .schema import (
    LATEST_SCHEMA_VERSION,
    SaveData,
    SaveDataFormatError,
    SaveDataVersioned,
    SchemaChainError,
    extract,
    load,
)
from .store import StorageError, commit, load_latest, run_command

__all__ = [
    "__version__",
    "AddCategory",
    "AddEvent",
    "AddTag",
    "Aggregate",
    "ArchiveCategory",
    "CategoryFilter",
    "ChangeEvent",
    "DeltaItem",
    "DescriptionFilter",
    "EndDateFilter",
    "Event",
    "EventIndexError",
    "LATEST_SCHEMA_VERSION",
    "RenameCategory",
    "SaveData",
    "SaveDataFormatError",
    "SaveDataVersioned",
    "SchemaChainError",
    "SetDailyNote",
    "SimpleTime",
    "StaleEventError",
    "StartDateFilter",
    "StorageError",
    "TagCategory",
    "aggregate",
    "apply",
    "apply_filters",
    "commit",
    "extract",
    "load",
    "load_latest",
    "run_command",
]
