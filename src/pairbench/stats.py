"""Sample statistics for the timing engine.

Reduces the per-call periods collected by :mod:`pairbench.timing` to a
mean, a standard error and a relative margin of error at 95%
confidence.  Pure Python, no external dependencies.

The margin of error uses the two-tailed Student's t quantile for
``n - 1`` degrees of freedom.  The quantile is found by bisection on
the t-distribution tail probability, which is computed through the
regularized incomplete beta function.

References:
    Student's t quantiles: Numerical Recipes, Chapter 6.4 (incomplete
        beta function by continued fractions).
"""

from __future__ import annotations

import functools
import math
import statistics
from dataclasses import dataclass
from typing import Sequence

# Two-tailed confidence used for every margin of error.
CONFIDENCE = 0.95


# ---------------------------------------------------------------------------
# Sample summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SampleStats:
    """Summary of the periods (seconds per call) of one benchmark."""

    sample: tuple[float, ...]
    mean: float
    variance: float
    deviation: float
    sem: float  # standard error of the mean
    moe: float  # margin of error
    rme: float  # relative margin of error, as a percentage

    @property
    def size(self) -> int:
        return len(self.sample)

    def to_dict(self) -> dict[str, float | int]:
        """Serialize to a dict with rounded values."""
        return {
            "size": self.size,
            "mean": round(self.mean, 12),
            "deviation": round(self.deviation, 12),
            "sem": round(self.sem, 12),
            "moe": round(self.moe, 12),
            "rme": round(self.rme, 4),
        }


def describe_periods(periods: Sequence[float]) -> SampleStats:
    """Summarize a sample of periods.

    Args:
        periods: Seconds per call, one value per sample.  Must not be
            empty.

    Returns:
        SampleStats.  With fewer than two samples the variance and every
        derived error value are 0.0.

    Raises:
        ValueError: If *periods* is empty.
    """
    if not periods:
        raise ValueError("Cannot describe an empty sample.")

    sample = tuple(periods)
    n = len(sample)
    mean = statistics.fmean(sample)

    if n < 2:
        return SampleStats(
            sample=sample,
            mean=mean,
            variance=0.0,
            deviation=0.0,
            sem=0.0,
            moe=0.0,
            rme=0.0,
        )

    variance = statistics.variance(sample, mean)
    deviation = math.sqrt(variance)
    sem = deviation / math.sqrt(n)
    moe = sem * t_critical(n - 1)
    rme = moe / mean * 100 if mean > 0 else 0.0

    return SampleStats(
        sample=sample,
        mean=mean,
        variance=variance,
        deviation=deviation,
        sem=sem,
        moe=moe,
        rme=rme,
    )


# ---------------------------------------------------------------------------
# Student's t quantile
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=256)
def t_critical(df: float, confidence: float = CONFIDENCE) -> float:
    """Return the two-tailed critical value of Student's t.

    Finds ``t`` such that ``P(|T| > t) == 1 - confidence`` for a
    t-distribution with *df* degrees of freedom.  For example,
    ``t_critical(1)`` is about 12.706 and ``t_critical(30)`` about 2.042.

    Raises:
        ValueError: If *df* is not positive or *confidence* is not in
            the open interval (0, 1).
    """
    if df <= 0 or math.isnan(df):
        raise ValueError(f"Degrees of freedom must be positive (got {df}).")
    if not 0 < confidence < 1:
        raise ValueError(f"Confidence must be between 0 and 1 (got {confidence}).")

    alpha = 1.0 - confidence

    lo, hi = 0.0, 1.0
    while t_two_tailed_p(hi, df) > alpha:
        lo, hi = hi, hi * 2

    # The tail probability decreases monotonically in t.
    for _ in range(100):
        mid = (lo + hi) / 2
        if t_two_tailed_p(mid, df) > alpha:
            lo = mid
        else:
            hi = mid
        if hi - lo < 1e-12:
            break

    return (lo + hi) / 2


def t_two_tailed_p(t: float, df: float) -> float:
    """Compute the two-tailed p-value ``P(|T| > t)`` of Student's t.

    Uses ``P(|T| > t) = I_x(df/2, 1/2)`` with ``x = df / (df + t^2)``.
    """
    if math.isinf(t):
        return 0.0
    if math.isnan(t) or math.isnan(df) or df <= 0:
        return float("nan")

    x = df / (df + t * t)
    p = _regularized_incomplete_beta(x, df / 2.0, 0.5)
    return min(max(p, 0.0), 1.0)


def _regularized_incomplete_beta(x: float, a: float, b: float) -> float:
    """Compute the regularized incomplete beta function I_x(a, b).

    Uses the continued fraction expansion (Lentz's method).
    """
    if x < 0 or x > 1:
        return float("nan")
    if x == 0:
        return 0.0
    if x == 1:
        return 1.0

    # Symmetry relation converges faster on this side.
    if x > (a + 1) / (a + b + 2):
        return 1.0 - _regularized_incomplete_beta(1 - x, b, a)

    # x^a * (1-x)^b / (a * B(a,b)), in log space.
    lbeta = math.lgamma(a) + math.lgamma(b) - math.lgamma(a + b)
    prefactor = math.exp(a * math.log(x) + b * math.log(1 - x) - lbeta - math.log(a))

    max_iter = 200
    epsilon = 1e-14
    tiny = 1e-30

    c = 1.0
    d = 1.0 - (a + b) * x / (a + 1)
    if abs(d) < tiny:
        d = tiny
    d = 1.0 / d
    f = d

    for m in range(1, max_iter + 1):
        # Even step.
        num = m * (b - m) * x / ((a + 2 * m - 1) * (a + 2 * m))
        d = 1.0 + num * d
        if abs(d) < tiny:
            d = tiny
        c = 1.0 + num / c
        if abs(c) < tiny:
            c = tiny
        d = 1.0 / d
        f *= c * d

        # Odd step.
        num = -((a + m) * (a + b + m) * x / ((a + 2 * m) * (a + 2 * m + 1)))
        d = 1.0 + num * d
        if abs(d) < tiny:
            d = tiny
        c = 1.0 + num / c
        if abs(c) < tiny:
            c = tiny
        d = 1.0 / d
        delta = c * d
        f *= delta

        if abs(delta - 1.0) < epsilon:
            break

    return prefactor * f
