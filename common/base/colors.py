"""Terminal colour helpers shared by the listing renderers."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, TextIO

ANSI_COLORS = {
    "red": "\033[91m",
    "green": "\033[92m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "magenta": "\033[95m",
    "cyan": "\033[96m",
    "white": "\033[97m",
}
ANSI_RESET = "\033[0m"

COLOR_MODES = ("auto", "always", "never")


def color_text(text: str, color: str) -> str:
    """Return ANSI-colored text for terminal output."""
    return f"{ANSI_COLORS.get(color, '')}{text}{ANSI_RESET}"


def use_color(mode: str = "auto", stream: Optional[TextIO] = None) -> bool:
    """Decide whether to emit colour for ``stream`` under the given mode."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


@dataclass(frozen=True)
class ColorScheme:
    """Colour names used for directories, files, and the date/time columns."""

    directory: str = "blue"
    file: str = "white"
    timestamp: str = "green"
