"""
Shared configuration loading and validation helpers.

Provides:
 - `load_config`: basic YAML loader
 - `load_logging_config`: normalized `logging:` section
 - `load_listing_config`: validated `listing:` section as a `ListingConfig`
 - `load_settings`: both sections from a single read
 - `resolve_config_path`: explicit path or the repository default
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from common.base.colors import ANSI_COLORS, COLOR_MODES, ColorScheme
from common.base.file_io import read_yaml
from common.base.logging import DEFAULT_FILE_PREFIX, normalize_level, normalize_use_rich


DEFAULT_CONFIG_FILENAME = "config.yaml"
LOGGING_SECTION_KEY = "logging"
LISTING_SECTION_KEY = "listing"
CONFIGS_DIR = Path(__file__).resolve().parents[2] / "configs"
DEFAULT_CONFIG_PATH = CONFIGS_DIR / DEFAULT_CONFIG_FILENAME

ROOT_ALLOWED_KEYS = {LOGGING_SECTION_KEY, LISTING_SECTION_KEY}
LOGGING_ALLOWED_KEYS = {"level", "use_rich", "log_dir", "file_prefix"}
LISTING_ALLOWED_KEYS = {"mode", "color", "colors"}
COLORS_ALLOWED_KEYS = {"directory", "file", "timestamp"}

LISTING_MODES = ("color", "plain")


@dataclass(frozen=True)
class ListingConfig:
    mode: str = "color"
    color: str = "auto"
    scheme: ColorScheme = field(default_factory=ColorScheme)


def resolve_config_path(explicit: str | Path | None) -> Optional[Path]:
    if explicit:
        return Path(explicit).expanduser().resolve()
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def load_config(path: str | Path | None) -> Dict[str, Any]:
    if not path:
        return {}

    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    data = read_yaml(cfg_path)
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration root must be a mapping in {cfg_path}")

    unknown = set(data) - ROOT_ALLOWED_KEYS
    if unknown:
        raise ValueError(
            f"Unknown configuration section(s) {', '.join(sorted(map(str, unknown)))} in {cfg_path}"
        )
    return dict(data)


def _section(root: Mapping[str, Any], key: str, allowed: set[str], source: str) -> Dict[str, Any]:
    payload = root.get(key)
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"'{key}' section must be a mapping in {source}")
    unknown = set(payload) - allowed
    if unknown:
        raise ValueError(
            f"Unknown key(s) {', '.join(sorted(map(str, unknown)))} in '{key}' section of {source}"
        )
    return dict(payload)


def _extract_logging_settings(root: Mapping[str, Any], source: str) -> Dict[str, Any]:
    raw = _section(root, LOGGING_SECTION_KEY, LOGGING_ALLOWED_KEYS, source)
    log_dir = raw.get("log_dir")
    return {
        "level": normalize_level(raw.get("level")),
        "use_rich": normalize_use_rich(raw.get("use_rich")),
        "log_dir": str(Path(str(log_dir)).expanduser().resolve()) if log_dir else None,
        "file_prefix": raw.get("file_prefix") or DEFAULT_FILE_PREFIX,
    }


def _choice(value: Any, choices: tuple[str, ...], key: str, source: str, default: str) -> str:
    if value is None:
        return default
    # YAML turns bare on/off into booleans.
    if isinstance(value, bool):
        value = "always" if value else "never"
    text = str(value).strip().lower()
    if text not in choices:
        raise ValueError(
            f"'{key}' in {source} must be one of {', '.join(choices)} (got {value!r})"
        )
    return text


def _extract_listing_settings(root: Mapping[str, Any], source: str) -> ListingConfig:
    raw = _section(root, LISTING_SECTION_KEY, LISTING_ALLOWED_KEYS, source)
    colors = _section(raw, "colors", COLORS_ALLOWED_KEYS, source)

    defaults = ColorScheme()
    scheme_values: Dict[str, str] = {}
    for key in COLORS_ALLOWED_KEYS:
        value = colors.get(key, getattr(defaults, key))
        name = str(value).strip().lower()
        if name not in ANSI_COLORS:
            raise ValueError(
                f"Unknown colour '{value}' for '{key}' in {source}. "
                f"Expected one of: {', '.join(sorted(ANSI_COLORS))}"
            )
        scheme_values[key] = name

    return ListingConfig(
        mode=_choice(raw.get("mode"), LISTING_MODES, "mode", source, "color"),
        color=_choice(raw.get("color"), COLOR_MODES, "color", source, "auto"),
        scheme=ColorScheme(**scheme_values),
    )


def load_logging_config(config_path: str | Path | None = None) -> Dict[str, Any]:
    root = load_config(config_path)
    return _extract_logging_settings(root, str(config_path or "defaults"))


def load_listing_config(config_path: str | Path | None = None) -> ListingConfig:
    root = load_config(config_path)
    return _extract_listing_settings(root, str(config_path or "defaults"))


def load_settings(config_path: str | Path | None = None) -> tuple[Dict[str, Any], ListingConfig]:
    """Read the file once and return (logging settings, listing settings)."""
    root = load_config(config_path)
    source = str(config_path or "defaults")
    return _extract_logging_settings(root, source), _extract_listing_settings(root, source)
