# taskit/store.py
"""Save-file persistence.

Commands never hold on to a loaded SaveData while writing. The sequence is
always: load -> interact -> reload -> rebase + apply -> atomic write.
Nothing locks the file between the reload and the write, so two
simultaneous invocations can still lose one of their updates.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Sequence, Union

from .delta import DeltaItem, apply, describe, rebase
from .schema import (
    SaveData,
    SaveDataVersioned,
    dump,
    empty_save_data,
    extract,
    load,
)

PathLike = Union[str, Path]
Interact = Callable[[SaveData], Sequence[DeltaItem]]

TMP_SUFFIX = ".tmp"
UPGRADE_BACKUP_SUFFIX = ".upgrade_bak"

logger = logging.getLogger(__name__)


class StorageError(OSError):
    """The save file (or its directory) could not be read or written."""


def tmp_path_for(path: PathLike) -> Path:
    p = Path(path)
    return p.with_name(p.name + TMP_SUFFIX)


def backup_path_for(path: PathLike) -> Path:
    p = Path(path)
    return p.with_name(p.name + UPGRADE_BACKUP_SUFFIX)


def read_save_data(path: PathLike) -> SaveDataVersioned:
    """Read and parse the save file; a missing file is an empty latest revision."""
    p = Path(path)
    try:
        raw = p.read_bytes()
    except FileNotFoundError:
        logger.debug("no save file at %s; starting empty", p)
        return empty_save_data()
    except OSError as e:
        raise StorageError(f"cannot read save file {p}: {e}") from e
    return load(raw)


def _discard(tmp: Path) -> None:
    try:
        tmp.unlink()
    except OSError:
        pass


def _stage(data: SaveDataVersioned, p: Path) -> Path:
    """Write `data` to the temp sibling of `p` and fsync it; `p` is untouched."""
    tmp = tmp_path_for(p)
    try:
        text = dump(data)
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        _discard(tmp)
        raise StorageError(f"cannot write save file {p}: {e}") from e
    except BaseException:
        _discard(tmp)
        raise
    logger.debug("staged %s (%d bytes)", tmp, len(text) + 1)
    return tmp


def write_save_data(data: SaveDataVersioned, path: PathLike) -> None:
    """Write via a sibling temp file and rename it over `path`."""
    p = Path(path)
    tmp = _stage(data, p)
    try:
        os.replace(tmp, p)
    except OSError as e:
        _discard(tmp)
        raise StorageError(f"cannot write save file {p}: {e}") from e
    logger.debug("wrote %s", p)


def load_latest(path: PathLike) -> SaveData:
    """Load and, if the file is an older revision, migrate it on disk.

    The pre-upgrade file is kept next to the save file with an
    `.upgrade_bak` suffix. The upgraded document is staged before the
    original is moved aside, and the original is put back if the final
    rename fails, so `path` never goes missing.
    """
    p = Path(path)
    data, upgraded = extract(read_save_data(p))
    if upgraded:
        bak = backup_path_for(p)
        logger.info("upgrading %s to the latest schema; previous file kept at %s", p, bak)
        tmp = _stage(data, p)
        try:
            os.replace(p, bak)
        except OSError as e:
            _discard(tmp)
            raise StorageError(f"cannot move {p} aside before upgrade: {e}") from e
        try:
            os.replace(tmp, p)
        except OSError as e:
            os.replace(bak, p)
            _discard(tmp)
            raise StorageError(f"cannot write upgraded save file {p}: {e}") from e
    return data


def reload(path: PathLike) -> SaveData:
    return extract(read_save_data(path))[0]


def commit(path: PathLike, intents: Sequence[DeltaItem]) -> SaveData:
    """Reload `path`, apply `intents` on top of what is there now, write it back."""
    current = reload(path)
    if not intents:
        return current
    resolved = rebase(intents, current)
    for item in resolved:
        logger.debug("apply: %s", describe(item))
    updated = apply(current, resolved)
    logger.info("applying %d change(s) to %s", len(resolved), path)
    write_save_data(updated, path)
    return updated


def run_command(path: PathLike, interact: Interact) -> SaveData:
    """Run one interactive command against the save file at `path`.

    `interact` gets the freshly loaded data and returns intents; it may take
    as long as it likes and must not touch storage itself.
    """
    snapshot = load_latest(path)
    intents = list(interact(snapshot))
    if not intents:
        logger.debug("command produced no changes")
        return snapshot
    return commit(path, intents)


__all__ = [
    "StorageError",
    "backup_path_for",
    "commit",
    "load_latest",
    "read_save_data",
    "reload",
    "run_command",
    "tmp_path_for",
    "write_save_data",
]
