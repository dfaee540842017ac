"""Directory listing for the current working directory."""

from .lister import (  # noqa: F401
    DisplayRecord,
    EntryMetadataError,
    FatalIOError,
    FileKind,
    ListerError,
    list_directory,
    list_directory_plain,
    render_record,
)

__all__ = [
    "DisplayRecord",
    "EntryMetadataError",
    "FatalIOError",
    "FileKind",
    "ListerError",
    "list_directory",
    "list_directory_plain",
    "render_record",
]
