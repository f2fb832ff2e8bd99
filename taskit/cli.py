from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from . import commands
from .commands import CommandAborted
from .dashboard import run_dashboard
from .delta import DeltaItem, EventIndexError, StaleEventError
from .paths import DATA_DIR_ENV, save_file_path
from .prompts import Prompter
from .schema import SaveData, SaveDataFormatError
from .store import StorageError, load_latest, run_command
from .util.console import die, eprint

LOG_LEVEL_ENV = "TASKIT_LOG_LEVEL"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="taskit", description="Journal of timed activities.")
    ap.add_argument(
        "--data-dir",
        default=None,
        help=f"Directory holding save.json (default: env {DATA_DIR_ENV} or the per-user data directory)",
    )
    ap.add_argument("--debug", action="store_true", help="Verbose logging on stderr")

    sub = ap.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    sub.add_parser("record", aliases=["add"], help="Add a new event, entering all of its fields.")
    sub.add_parser(
        "stopwatch",
        aliases=["time", "start"],
        help="Start a timer and add it as an event once it's done.",
    )
    sub.add_parser(
        "show",
        aliases=["list"],
        help="Open the dashboard that displays tracked time and lets you filter events.",
    )
    p_amend = sub.add_parser("amend", help="Modify a previously added event.")
    p_amend.add_argument("--latest", action="store_true", help="Amend the most recently added event.")
    p_archive = sub.add_parser("archive", help="Mark a category as archived so no new events use it.")
    p_archive.add_argument("category")
    sub.add_parser("tag", help="Add a tag to a category for larger aggregation.")
    sub.add_parser("note", help="Add a note to a day.")
    p_rename = sub.add_parser("rename", help="Rename a category everywhere it is used.")
    p_rename.add_argument("old")
    p_rename.add_argument("new")
    return ap


_CANONICAL = {"add": "record", "time": "stopwatch", "start": "stopwatch", "list": "show"}


def _configure_logging(debug: bool) -> None:
    level_name = "DEBUG" if debug else os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def _interaction(args: argparse.Namespace, ui: Prompter) -> Callable[[SaveData], List[DeltaItem]]:
    cmd = _CANONICAL.get(args.command, args.command)
    if cmd == "record":
        return lambda data: commands.record(data, ui)
    if cmd == "stopwatch":
        return lambda data: commands.stopwatch(data, ui)
    if cmd == "amend":
        if args.latest:
            return lambda data: commands.amend(data, ui, 0)
        return lambda data: commands.dispatch_amend(data, ui)
    if cmd == "archive":
        return lambda data: commands.archive(data, args.category)
    if cmd == "tag":
        return lambda data: commands.tag(data, ui)
    if cmd == "note":
        return lambda data: commands.note(data, ui)
    if cmd == "rename":
        return lambda data: commands.rename(data, args.old, args.new)
    raise ValueError(f"unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, *, ui: Optional[Prompter] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.debug)

    try:
        path = save_file_path(Path(args.data_dir).expanduser() if args.data_dir else None)
        logger.debug("save file: %s", path)
        if _CANONICAL.get(args.command, args.command) == "show":
            run_dashboard(load_latest(path))
            return 0
        run_command(path, _interaction(args, ui or Prompter()))
    except CommandAborted as e:
        eprint(f"[taskit] {e}; nothing was saved.")
        return 1
    except (EventIndexError, StaleEventError) as e:
        return die(str(e), rc=3)
    except SaveDataFormatError as e:
        return die(f"save file is unreadable: {e}")
    except (StorageError, OSError) as e:
        return die(str(e))
    except ValueError as e:
        return die(str(e))
    except (KeyboardInterrupt, EOFError):
        eprint("\n[taskit] Cancelled; nothing was saved.")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
