"""Glob selection of benchmark specs by name.

Spec names are slash-separated paths such as ``map/small``.  Patterns
are matched segment by segment with :func:`fnmatch.fnmatchcase`:

- ``*``, ``?`` and ``[...]`` match within a single segment.
- A ``**`` segment matches zero or more whole segments.
- A leading ``!`` negates the whole pattern.

``"**"`` matches every name.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Callable, Iterable

DEFAULT_PATTERN = "**"


def _match_segments(pattern: list[str], name: list[str]) -> bool:
    if not pattern:
        return not name
    head = pattern[0]
    if head == "**":
        rest = pattern[1:]
        # Collapse repeated globstars.
        while rest and rest[0] == "**":
            rest = rest[1:]
        if not rest:
            return True
        return any(_match_segments(rest, name[i:]) for i in range(len(name) + 1))
    if not name:
        return False
    return fnmatchcase(name[0], head) and _match_segments(pattern[1:], name[1:])


def compile_matcher(pattern: str) -> Callable[[str], bool]:
    """Compile a glob *pattern* into a predicate over spec names."""
    negated = pattern.startswith("!")
    if negated:
        pattern = pattern[1:]
    segments = pattern.split("/")

    def matcher(name: str) -> bool:
        return _match_segments(segments, name.split("/")) != negated

    return matcher


def select_specs(names: Iterable[str], pattern: str = DEFAULT_PATTERN) -> list[str]:
    """Return the names matching *pattern*, in their original order.

    *names* is usually the spec mapping itself, whose iteration order is
    the execution order.
    """
    matches = compile_matcher(pattern)
    return [name for name in names if matches(name)]
