"""Significance of the difference between two rates.

``change`` is the signed fractional change from the left (old) rate to
the right (new) rate.  ``difference`` is the absolute difference
divided by the average of both rates, then halved; it lies in
``[0, 1]`` for positive rates and is what the significance threshold is
compared against.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Verdict(str, enum.Enum):
    """Outcome of comparing two rates against a threshold."""

    IMPROVEMENT = "improvement"
    REGRESSION = "regression"
    NONE = "none"

    @property
    def marker(self) -> str:
        """Glyph shown in the report: ✓, ✗ or nothing."""
        if self is Verdict.IMPROVEMENT:
            return "✓"
        if self is Verdict.REGRESSION:
            return "✗"
        return ""


@dataclass(frozen=True)
class Significance:
    """Result of :func:`evaluate`."""

    change: float
    difference: float
    verdict: Verdict

    @property
    def significant(self) -> bool:
        return self.verdict is not Verdict.NONE


def relative_change(old_rate: float, new_rate: float) -> float:
    """``(new - old) / old``; infinite when only the new rate is non-zero."""
    if old_rate == 0:
        return float("inf") if new_rate > 0 else 0.0
    return (new_rate - old_rate) / old_rate


def relative_difference(old_rate: float, new_rate: float) -> float:
    """Absolute difference over the mean of both rates, halved."""
    average = (old_rate + new_rate) / 2
    if average == 0:
        return 0.0
    return abs((new_rate - old_rate) / average / 2)


def evaluate(old_rate: float, new_rate: float, threshold: float) -> Significance:
    """Compare two rates.

    The difference must exceed *threshold* strictly to count; the sign
    of the change then picks improvement or regression.
    """
    change = relative_change(old_rate, new_rate)
    difference = relative_difference(old_rate, new_rate)

    if difference > threshold and change > 0:
        verdict = Verdict.IMPROVEMENT
    elif difference > threshold and change < 0:
        verdict = Verdict.REGRESSION
    else:
        verdict = Verdict.NONE

    return Significance(change=change, difference=difference, verdict=verdict)
