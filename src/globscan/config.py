"""
TOML-based config file loading for globscan.

Searches for `.globscan.toml`, `globscan.toml`, or `pyproject.toml [tool.globscan]`
walking up from the current directory. Config values are merged with CLI flags
using three-way precedence: explicit CLI flags > config file > built-in defaults.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass
class GlobscanConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    ignore: list[str] | None = None
    dot: bool | None = None
    absolute: bool | None = None
    deep: int | None = None
    only_directories: bool | None = None
    only_files: bool | None = None
    case_sensitive: bool | None = None
    follow_symlinks: bool | None = None
    strict: bool | None = None
    gitignore: bool | None = None
    concurrency: int | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".globscan.toml", "globscan.toml", "pyproject.toml"]

# Optional tables grouping the same keys, e.g. `[filters]` or `[traversal]`
_SECTIONS = ("filters", "traversal")

_VALID_FIELDS = {f.name for f in fields(GlobscanConfig)}

log = logging.getLogger(__name__)


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.globscan.toml` >
    `globscan.toml` > `pyproject.toml` (only if it has `[tool.globscan]`).
    """
    start = start_dir.resolve()
    for directory in (start, *start.parents):
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _globscan_table(candidate) is not None:
                return candidate
    return None


def _globscan_table(pyproject: Path) -> dict[str, Any] | None:
    """The `[tool.globscan]` table of a pyproject.toml, or `None` if absent or unreadable."""
    try:
        data = tomllib.loads(pyproject.read_text())
    except (tomllib.TOMLDecodeError, OSError):
        return None
    table = data.get("tool", {}).get("globscan")
    return cast(dict[str, Any], table) if isinstance(table, dict) else None


def load_config(config_path: Path) -> GlobscanConfig:
    """
    Load a `GlobscanConfig` from a TOML file: a standalone `globscan.toml` /
    `.globscan.toml`, or the `[tool.globscan]` table of a `pyproject.toml`.
    """
    if config_path.name == "pyproject.toml":
        return _parse_config_data(_globscan_table(config_path) or {})
    return _parse_config_data(tomllib.loads(config_path.read_text()))


def _parse_config_data(data: dict[str, Any]) -> GlobscanConfig:
    """Parse a flat or sectioned TOML dict into GlobscanConfig. Keys may be kebab-case."""
    flat = dict(data)
    for section in _SECTIONS:
        table = flat.pop(section, None)
        if isinstance(table, dict):
            flat.update(cast(dict[str, Any], table))

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        name = key.replace("-", "_")
        if name not in _VALID_FIELDS:
            log.warning("Ignoring unrecognized config key: %s", key)
            continue
        mapped[name] = [value] if name == "ignore" and isinstance(value, str) else value

    return GlobscanConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: GlobscanConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    `ignore` is additive: config patterns come first, then CLI patterns.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(GlobscanConfig):
        name = cfg_field.name
        value = getattr(config, name)
        if value is None or not hasattr(cli_opts, name):
            continue
        if name == "ignore":
            setattr(cli_opts, name, [*value, *getattr(cli_opts, name)])
        elif name not in explicit_flags:
            setattr(cli_opts, name, value)

    return cli_opts
