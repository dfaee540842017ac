"""Low-level shared utilities for the directory lister."""

from .colors import ColorScheme, color_text, use_color
from .logging import get_logger, setup_logging, ListerLogger

__all__ = [
    "ColorScheme",
    "color_text",
    "use_color",
    "get_logger",
    "setup_logging",
    "ListerLogger",
]
