"""Run options and their resolution.

Options come from three places, lowest precedence first:

1. The built-in defaults of :class:`Options`.
2. The options given to :func:`pairbench.runner.create_runner`.
3. The overrides given to one call of the returned runner.

Each key is resolved on its own.  A value overrides the tier below it
only when it has the same kind as the value it replaces (boolean,
number, string, callable or mapping).  Anything else, including
``None`` and unknown keys, is ignored without error.

Options can also be read from a YAML profile::

    match: "map/*"
    colors: false
    significant_difference: 0.05
    left_header: "v1.2"
    right_header: "HEAD"
    config:
      min_samples: 10
      max_time: 2.0
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable

from pairbench.logging import get_logger

log = get_logger("options")


def _noop() -> None:
    pass


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Options:
    """Effective options for one run."""

    callback: Callable[[], Any] = _noop
    colors: bool = True
    config: Mapping[str, Any] = field(default_factory=dict)
    left_header: str = "left"
    match: str = "**"
    right_header: str = "right"
    significant_difference: float = 0.1


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def value_kind(value: Any) -> str:
    """Classify a value for the same-kind check.

    ``bool`` is checked before numbers since it subclasses ``int``.
    """
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "mapping"
    if callable(value):
        return "callable"
    return "object"


def _lookup(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def resolve(key: str, fallback: Any, source: Any) -> Any:
    """Return ``source[key]`` if it has the same kind as *fallback*.

    *source* may be a mapping, any object with attributes, or None.
    Otherwise *fallback* is returned.
    """
    value = _lookup(source, key)
    if value_kind(value) == value_kind(fallback):
        return value
    return fallback


def resolve_options(source: Any, base: Options | None = None) -> Options:
    """Layer *source* on top of *base* (default: built-in defaults)."""
    base = base or Options()
    resolved = {f.name: resolve(f.name, getattr(base, f.name), source) for f in fields(Options)}
    return Options(**resolved)


# ---------------------------------------------------------------------------
# YAML profiles
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load run options from a YAML file.

    Returns:
        The parsed YAML mapping.  Keys are not validated here; they go
        through :func:`resolve_options` like any other source.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a mapping.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    known = {f.name for f in fields(Options)}
    for key in data:
        if key not in known:
            log.debug("Profile %s: ignoring unknown option '%s'", profile_path, key)

    return data


def merge_sources(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge option mappings left to right, skipping ``None`` values.

    ``config`` mappings are merged key by key instead of replaced, and
    left out entirely when nothing in them is set.
    """
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if value is None:
                continue
            if key == "config" and isinstance(value, Mapping):
                config = dict(merged.get("config") or {})
                config.update({k: v for k, v in value.items() if v is not None})
                if config:
                    merged["config"] = config
            else:
                merged[key] = value
    return merged
