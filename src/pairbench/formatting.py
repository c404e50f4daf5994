"""Shared text formatting helpers for pairbench.

Provides the box-drawing table used for comparison reports.
"""

from __future__ import annotations

import click

# Box-drawing pieces: (left, junction, right) per horizontal rule.
_TOP = ("┌", "┬", "┐")
_MID = ("├", "┼", "┤")
_BOTTOM = ("└", "┴", "┘")
_HORIZONTAL = "─"
_VERTICAL = "│"


def visible_width(text: str) -> int:
    """Length of *text* once ANSI escape sequences are removed."""
    return len(click.unstyle(text))


def format_box_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    styled: bool = True,
) -> str:
    """Format rows as a table framed with box-drawing characters.

    Cells are left-aligned with one space of padding on each side, and a
    rule separates every body row.  Column widths ignore ANSI escapes
    already present in cells.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.  Short rows are
            padded with empty cells.
        styled: If True, draw borders in grey and headers in red.  If
            False, the output contains no escape sequences of its own.

    Returns:
        The formatted table, without a trailing newline.
    """
    if not headers:
        return ""

    ncols = len(headers)
    body = [(list(row) + [""] * ncols)[:ncols] for row in rows]

    widths = [visible_width(h) for h in headers]
    for row in body:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], visible_width(cell))

    def border(text: str) -> str:
        return click.style(text, fg="bright_black") if styled else text

    def head(text: str) -> str:
        return click.style(text, fg="red") if styled else text

    def rule(pieces: tuple[str, str, str]) -> str:
        left, junction, right = pieces
        return border(left + junction.join(_HORIZONTAL * (w + 2) for w in widths) + right)

    def line(cells: list[str], decorate) -> str:
        bar = border(_VERTICAL)
        parts = [
            f" {decorate(cell)}{' ' * (widths[ci] - visible_width(cell))} "
            for ci, cell in enumerate(cells)
        ]
        return bar + bar.join(parts) + bar

    lines = [rule(_TOP), line(list(headers), head)]
    for row in body:
        lines.append(rule(_MID))
        lines.append(line(row, lambda cell: cell))
    lines.append(rule(_BOTTOM))

    return "\n".join(lines)
