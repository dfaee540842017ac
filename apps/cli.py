"""Command-line entry point for the directory lister.

Installed as the ``file-list`` console script. The tool always lists the
current working directory; the options below only tune logging, colour, and
which of the two renderings is used. Shell completion is provided through
``argcomplete``.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, Iterable, List, Optional

import argcomplete

from common.base.colors import COLOR_MODES, use_color
from common.base.logging import get_logger, setup_logging
from common.shared.loader import (
    LISTING_MODES,
    ListingConfig,
    load_settings,
    resolve_config_path,
)
from file.lister import (
    ListerError,
    list_directory,
    list_directory_plain,
    print_listing,
    render_record,
)

LIST_TARGET = "."
EXIT_INTERRUPTED = 130
EXIT_BROKEN_PIPE = 1

log = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-list",
        description="List the current directory with modification date, time, and size.",
    )
    parser.add_argument("--config", "-c", help="Path to configuration YAML (defaults to repo config).")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured logging verbosity.",
    )
    parser.add_argument(
        "--mode",
        choices=LISTING_MODES,
        help="Rendering: 'color' (default) or the legacy comma-separated 'plain'.",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        help="When to emit ANSI colour in 'color' mode (default: auto). Ignored with --mode plain.",
    )
    return parser


def _load_settings(config_arg: Optional[str]) -> tuple[Dict[str, Any], ListingConfig]:
    try:
        return load_settings(resolve_config_path(config_arg))
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"file-list: {exc}") from exc


def _render_lines(listing: ListingConfig, color_mode: str) -> List[str]:
    if listing.mode == "plain":
        return list_directory_plain(LIST_TARGET)

    records = list_directory(LIST_TARGET)
    color = use_color(color_mode, sys.stdout)
    return [render_record(record, color=color, scheme=listing.scheme) for record in records]


def _detach_stdout() -> None:
    """Point stdout at devnull so the final flush at exit cannot fail again."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def cli_file_list(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging_cfg, listing = _load_settings(args.config)
    setup_logging(
        level=args.log_level or logging_cfg.get("level"),
        use_rich=logging_cfg.get("use_rich"),
        log_dir=logging_cfg.get("log_dir"),
        file_prefix=logging_cfg.get("file_prefix"),
    )
    if args.mode:
        listing = ListingConfig(mode=args.mode, color=listing.color, scheme=listing.scheme)
    color_mode = args.color or listing.color
    log.debug("Arguments: %s (mode=%s, color=%s)", args, listing.mode, color_mode)

    try:
        lines = _render_lines(listing, color_mode)
    except ListerError as exc:
        log.debug("Listing aborted", exc_info=True)
        raise SystemExit(f"file-list: {exc}") from exc
    except KeyboardInterrupt:
        log.warning("Listing cancelled by user.")
        return EXIT_INTERRUPTED

    try:
        print_listing(lines)
        sys.stdout.flush()
    except BrokenPipeError:
        # Reader went away (e.g. `file-list | head`); silence the flush at interpreter exit.
        _detach_stdout()
        return EXIT_BROKEN_PIPE
    return 0


if __name__ == "__main__":
    raise SystemExit(cli_file_list())
