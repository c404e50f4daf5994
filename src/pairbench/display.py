"""Report rows for comparison results.

Turns the measurements of one spec and their significance into a
:class:`ComparisonRow`.  Row data stays plain text; highlighting is only
applied when the cells are read for display.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

import click

from pairbench.compare import Significance, Verdict
from pairbench.timing import MeasurementResult

# Fixed header columns around the two subject headers.
SUITE_HEADER = "suite"
DIFF_HEADER = "diff"
CHANGE_HEADER = "change"
MARKER_HEADER = "α"

_HIGHLIGHT_COLORS = {
    Verdict.IMPROVEMENT: "green",
    Verdict.REGRESSION: "red",
}


def _half_up(value: float, places: int) -> Decimal | float:
    """Round *value* half away from zero, keeping non-finite values as is."""
    if not math.isfinite(value):
        return value
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_measurement(result: MeasurementResult) -> str:
    """Format as ``'1,234 Hz ±0.56% (n 42)'``.

    Halves round away from zero: a rate of 1000.5 gives ``'1,001 Hz'``.
    """
    rate = _half_up(result.rate, 0)
    rme = _half_up(result.relative_margin_of_error, 2)
    return f"{rate:,.0f} Hz ±{rme:.2f}% (n {result.sample_size})"


def format_pct(pct: float, *, signed: bool = False) -> str:
    """Format a percentage with at least three integer digits.

    Unsigned values use the magnitude: ``12.34`` gives ``'012.3%'``.
    Signed values always carry ``+`` or ``-``: ``-5`` gives ``'-005.0%'``.
    Halves round away from zero: ``12.25`` gives ``'012.3%'``.
    """
    magnitude = _half_up(abs(pct), 1)
    if signed:
        sign = "+" if pct >= 0 else "-"
        return f"{sign}{magnitude:05.1f}%"
    return f"{magnitude:05.1f}%"


def highlighter(verdict: Verdict, colors: bool) -> Callable[[str], str]:
    """Return the function that highlights cells for *verdict*."""
    color = _HIGHLIGHT_COLORS.get(verdict)
    if not colors or color is None:
        return lambda s: s
    return lambda s: click.style(s, fg=color)


def report_headers(left_header: str, right_header: str) -> list[str]:
    return [SUITE_HEADER, left_header, right_header, DIFF_HEADER, CHANGE_HEADER, MARKER_HEADER]


@dataclass(frozen=True)
class ComparisonRow:
    """One line of the comparison report."""

    name: str
    left: str
    right: str
    diff: str
    change: str
    marker: str
    verdict: Verdict
    colors: bool = False
    left_result: MeasurementResult | None = None
    right_result: MeasurementResult | None = None

    @property
    def cells(self) -> list[str]:
        """Cells for display, with change and marker highlighted."""
        highlight = highlighter(self.verdict, self.colors)
        return [
            self.name,
            self.left,
            self.right,
            self.diff,
            highlight(self.change),
            highlight(self.marker),
        ]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "left": self.left,
            "right": self.right,
            "diff": self.diff,
            "change": self.change,
            "verdict": self.verdict.value,
        }
        if self.left_result is not None:
            data["left_result"] = self.left_result.to_dict()
        if self.right_result is not None:
            data["right_result"] = self.right_result.to_dict()
        return data


def build_row(
    name: str,
    left: MeasurementResult,
    right: MeasurementResult,
    significance: Significance,
    *,
    colors: bool,
) -> ComparisonRow:
    """Build the report row for one spec."""
    return ComparisonRow(
        name=name,
        left=format_measurement(left),
        right=format_measurement(right),
        diff=format_pct(significance.difference * 100),
        change=format_pct(significance.change * 100, signed=True),
        marker=significance.verdict.marker,
        verdict=significance.verdict,
        colors=colors,
        left_result=left,
        right_result=right,
    )
