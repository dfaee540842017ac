"""
file.lister

Single-directory listing. Every entry of the target directory becomes a
`DisplayRecord` carrying its name, UTC modification date and time, and byte
size, tagged with one of four kinds (hidden x directory). Records are built
eagerly in the order the filesystem enumerates them; nothing is sorted.

Two renderings exist:
 - the colour mode (`render_record`), which substitutes a placeholder record
   for any entry whose metadata cannot be read and keeps going
 - the legacy plain mode (`list_directory_plain`), a comma-separated line per
   entry that aborts on the first unreadable entry
"""

from __future__ import annotations

import os
import stat
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from common.base.colors import ColorScheme, color_text
from common.base.logging import get_logger

log = get_logger(__name__)

# Locale-independent; calendar.month_name is not.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# ----------------------------------------------------------------------
# ERRORS
# ----------------------------------------------------------------------

class ListerError(Exception):
    """Base class for listing failures."""


class FatalIOError(ListerError):
    """The directory itself could not be opened or enumerated."""

    def __init__(self, path: Path | str, reason: OSError):
        self.path = str(path)
        self.reason = reason
        detail = reason.strerror or str(reason)
        super().__init__(f"cannot list '{self.path}': {detail}")


class EntryMetadataError(ListerError):
    """Metadata for a single directory entry could not be read or converted."""

    def __init__(self, name: str, reason: Exception):
        self.name = name
        self.reason = reason
        detail = getattr(reason, "strerror", None) or str(reason)
        super().__init__(f"cannot read metadata for '{name}': {detail}")


# ----------------------------------------------------------------------
# RECORD TYPES
# ----------------------------------------------------------------------

class FileKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    HIDDEN_REGULAR = "hidden_regular"
    HIDDEN_DIRECTORY = "hidden_directory"

    @classmethod
    def classify(cls, name: str, is_dir: bool) -> "FileKind":
        if name.startswith("."):
            return cls.HIDDEN_DIRECTORY if is_dir else cls.HIDDEN_REGULAR
        return cls.DIRECTORY if is_dir else cls.REGULAR

    @property
    def is_hidden(self) -> bool:
        return self in (FileKind.HIDDEN_REGULAR, FileKind.HIDDEN_DIRECTORY)

    @property
    def is_directory(self) -> bool:
        return self in (FileKind.DIRECTORY, FileKind.HIDDEN_DIRECTORY)


@dataclass(frozen=True)
class DisplayRecord:
    name: str
    kind: FileKind
    modified_date: str
    modified_time: str
    size_bytes: int

    @classmethod
    def placeholder(cls) -> "DisplayRecord":
        """Record used when an entry's metadata cannot be read."""
        return cls(
            name="",
            kind=FileKind.REGULAR,
            modified_date="",
            modified_time="",
            size_bytes=0,
        )


# ----------------------------------------------------------------------
# TIMESTAMP FORMATTING
# ----------------------------------------------------------------------

def to_utc(timestamp: float) -> datetime:
    """Whole-second UTC datetime for a POSIX modification timestamp."""
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


def month_name(moment: datetime) -> str:
    return MONTH_NAMES[moment.month - 1]


def format_date(moment: datetime) -> str:
    return f"{moment.day} {month_name(moment)}"


def format_time(moment: datetime) -> str:
    # Hour and minute are intentionally unpadded: 09:03 renders as "9:3".
    return f"{moment.hour}:{moment.minute}"


# ----------------------------------------------------------------------
# ENTRY -> RECORD
# ----------------------------------------------------------------------

def _read_stat(entry: os.DirEntry) -> os.stat_result:
    return entry.stat(follow_symlinks=False)


def build_record(entry: os.DirEntry) -> DisplayRecord:
    """
    Convert one directory entry into a `DisplayRecord`.

    Metadata failures (entry removed mid-listing, permission denied) yield the
    placeholder record instead of raising.
    """
    try:
        info = _read_stat(entry)
        moment = to_utc(info.st_mtime)
    except (OSError, OverflowError, ValueError) as exc:
        log.warning("Could not read metadata for %r, using placeholder: %s", entry.name, exc)
        return DisplayRecord.placeholder()

    return DisplayRecord(
        name=entry.name,
        kind=FileKind.classify(entry.name, stat.S_ISDIR(info.st_mode)),
        modified_date=format_date(moment),
        modified_time=format_time(moment),
        size_bytes=info.st_size,
    )


def list_directory(path: Path | str = ".") -> List[DisplayRecord]:
    """
    Build one record per entry of ``path`` in enumeration order.

    Raises:
        FatalIOError: If the directory cannot be opened or enumerated.
    """
    log.debug("Listing directory: %s", path)
    try:
        with os.scandir(path) as entries:
            records = [build_record(entry) for entry in entries]
    except OSError as exc:
        raise FatalIOError(path, exc) from exc

    log.debug("Collected %d record(s) from %s", len(records), path)
    return records


# ----------------------------------------------------------------------
# LEGACY PLAIN MODE
# ----------------------------------------------------------------------

def format_plain_line(name: str, moment: datetime, size: int) -> str:
    return f"{name}, {month_name(moment)} {moment.day}, {moment.year}, {size}"


def list_directory_plain(path: Path | str = ".") -> List[str]:
    """
    Legacy comma-separated listing: ``name, Month day, year, size``.

    Raises:
        FatalIOError: If the directory cannot be opened or enumerated.
        EntryMetadataError: On the first entry whose metadata cannot be read.
    """
    lines: List[str] = []
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    info = _read_stat(entry)
                    moment = to_utc(info.st_mtime)
                except (OSError, OverflowError, ValueError) as exc:
                    raise EntryMetadataError(entry.name, exc) from exc
                lines.append(format_plain_line(entry.name, moment, info.st_size))
    except OSError as exc:
        raise FatalIOError(path, exc) from exc
    return lines


# ----------------------------------------------------------------------
# RENDERING
# ----------------------------------------------------------------------

def render_record(
    record: DisplayRecord,
    *,
    color: bool = True,
    scheme: Optional[ColorScheme] = None,
) -> str:
    """Format ``name date time size``; directories and files differ in colour."""
    name = record.name
    date = record.modified_date
    time = record.modified_time
    size = str(record.size_bytes)

    if color:
        scheme = scheme or ColorScheme()
        if record.kind in (FileKind.DIRECTORY, FileKind.HIDDEN_DIRECTORY):
            name_color = scheme.directory
        elif record.kind in (FileKind.REGULAR, FileKind.HIDDEN_REGULAR):
            name_color = scheme.file
        else:  # pragma: no cover - FileKind is closed
            raise ValueError(f"Unhandled file kind: {record.kind}")
        name = color_text(name, name_color)
        date = color_text(date, scheme.timestamp)
        time = color_text(time, scheme.timestamp)
        size = color_text(size, scheme.directory)

    return f"{name} {date} {time} {size}"


def print_listing(lines: Iterable[str], stream: Optional[TextIO] = None) -> None:
    """Write one line per record; undecodable names go out as their original bytes."""
    out = stream if stream is not None else sys.stdout
    reconfigure = getattr(out, "reconfigure", None)
    if reconfigure is not None:
        # os.scandir surrogate-escapes names that are not valid in the filesystem encoding.
        reconfigure(errors="surrogateescape")
    for line in lines:
        print(line, file=out)
