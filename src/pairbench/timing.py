"""Micro-benchmark timing engine.

Runs a callable repeatedly and turns the measured periods into a rate
(calls per second) with a relative margin of error.

Synchronous trials are calibrated: the number of calls per sample is
scaled up until one sample takes at least ``min_time`` seconds, so the
clock resolution does not dominate fast callables.  Deferred trials
receive a :class:`Deferred` token and are only complete once the trial
calls ``token.resolve()``, possibly from another thread.

Benchmarks are grouped in a :class:`Suite` and always run one after
another, in the order they were added.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping

from pairbench.stats import SampleStats, describe_periods

log = logging.getLogger("pairbench")

# Smallest elapsed time trusted when scaling the call count.
_CLOCK_RESOLUTION = 1e-6


class TrialError(RuntimeError):
    """A trial function raised, or a deferred trial never resolved."""

    def __init__(self, benchmark: str, cause: BaseException) -> None:
        super().__init__(f"Benchmark '{benchmark}' failed: {cause!r}")
        self.benchmark = benchmark
        self.cause = cause


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class TimingConfig:
    """Timing options for one benchmark."""

    min_samples: int = 5
    min_time: float = 0.05  # Seconds per sample
    max_time: float = 1.0  # Seconds of sampling per benchmark
    initial_count: int = 1
    defer: bool = False
    defer_timeout: float = 60.0
    on_error: Callable[[TrialError], Any] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TimingConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in data if k not in known and k != "fn")
        if unknown:
            log.debug("Ignoring unknown timing options: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MeasurementResult:
    """Outcome of one benchmark: a rate with its error margin."""

    rate: float  # Calls per second
    relative_margin_of_error: float  # Percentage
    sample_size: int
    stats: SampleStats | None = None

    @classmethod
    def from_stats(cls, stats: SampleStats) -> MeasurementResult:
        return cls(
            rate=1.0 / stats.mean if stats.mean > 0 else float("inf"),
            relative_margin_of_error=stats.rme,
            sample_size=stats.size,
            stats=stats,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rate": self.rate,
            "relative_margin_of_error": round(self.relative_margin_of_error, 4),
            "sample_size": self.sample_size,
        }


# ---------------------------------------------------------------------------
# Deferred completion
# ---------------------------------------------------------------------------


class Deferred:
    """Completion token passed to trials running in deferred mode."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def resolve(self) -> None:
        """Mark this call as finished."""
        self._event.set()

    @property
    def resolved(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


# ---------------------------------------------------------------------------
# Benchmark
# ---------------------------------------------------------------------------


class Benchmark:
    """One callable measured under one TimingConfig."""

    def __init__(
        self,
        name: str,
        fn: Callable[..., Any],
        config: TimingConfig | None = None,
    ) -> None:
        self.name = name
        self.fn = fn
        self.config = config or TimingConfig()
        self.result: MeasurementResult | None = None
        self.error: TrialError | None = None

    def run(self) -> MeasurementResult:
        """Sample the callable until the config's stop criteria are met.

        Raises:
            TrialError: If the callable raises or a deferred call is not
                resolved in time.
        """
        cfg = self.config
        count = max(int(cfg.initial_count), 1)
        periods: list[float] = []
        started = time.perf_counter()

        while True:
            elapsed = self._cycle(count)

            if not cfg.defer and elapsed < cfg.min_time:
                count = max(
                    count + 1,
                    math.ceil(count * cfg.min_time / max(elapsed, _CLOCK_RESOLUTION)),
                )
                continue

            periods.append(elapsed / count)
            if len(periods) >= cfg.min_samples and time.perf_counter() - started >= cfg.max_time:
                break

        self.result = MeasurementResult.from_stats(describe_periods(periods))
        log.debug(
            "%s: %.1f Hz from %d samples of %d call(s)",
            self.name,
            self.result.rate,
            len(periods),
            count,
        )
        return self.result

    def _cycle(self, count: int) -> float:
        """Call the function *count* times, returning elapsed seconds."""
        fn = self.fn
        try:
            if self.config.defer:
                start = time.perf_counter()
                for _ in range(count):
                    deferred = Deferred()
                    fn(deferred)
                    if not deferred.wait(self.config.defer_timeout):
                        raise TimeoutError(
                            f"Deferred call not resolved within {self.config.defer_timeout}s"
                        )
                return time.perf_counter() - start

            start = time.perf_counter()
            for _ in range(count):
                fn()
            return time.perf_counter() - start
        except Exception as exc:
            raise TrialError(self.name, exc) from exc


# ---------------------------------------------------------------------------
# Suite
# ---------------------------------------------------------------------------


class Suite:
    """An ordered group of benchmarks that complete together.

    Usage::

        suite = Suite("sort")
        suite.add("left", {"fn": lambda: sorted(data), "min_samples": 10})
        suite.add("right", {"fn": lambda: data.sort()})
        suite.on("complete", lambda s: print([b.result for b in s]))
        suite.run()
    """

    EVENTS = ("cycle", "error", "complete")

    def __init__(self, name: str) -> None:
        self.name = name
        self.benchmarks: list[Benchmark] = []
        self.aborted = False
        self._listeners: dict[str, list[Callable[..., Any]]] = {e: [] for e in self.EVENTS}

    def __len__(self) -> int:
        return len(self.benchmarks)

    def __iter__(self):
        return iter(self.benchmarks)

    def __getitem__(self, index: int) -> Benchmark:
        return self.benchmarks[index]

    def add(self, name: str, options: Mapping[str, Any]) -> Suite:
        """Add a benchmark; *options* holds ``fn`` and timing options."""
        if not callable(options.get("fn")):
            raise ValueError(f"Benchmark '{name}' in suite '{self.name}' needs a callable 'fn'.")
        self.benchmarks.append(Benchmark(name, options["fn"], TimingConfig.from_mapping(options)))
        return self

    def on(self, event: str, listener: Callable[..., Any]) -> Suite:
        if event not in self._listeners:
            raise ValueError(f"Unknown suite event '{event}'. Valid events: {', '.join(self.EVENTS)}")
        self._listeners[event].append(listener)
        return self

    def _emit(self, event: str, payload: Any) -> None:
        for listener in self._listeners[event]:
            listener(payload)

    def run(self) -> Suite:
        """Run every benchmark in order, then emit ``complete``.

        A failing benchmark with an ``on_error`` hook aborts the suite:
        the hook and the ``error`` listeners are called and ``complete``
        is never emitted.  Without a hook the TrialError propagates.
        """
        self.aborted = False
        for bench in self.benchmarks:
            try:
                bench.run()
            except TrialError as err:
                bench.error = err
                self.aborted = True
                if bench.config.on_error is None:
                    raise
                log.debug("Suite '%s' aborted by %s", self.name, bench.name)
                bench.config.on_error(err)
                self._emit("error", err)
                return self
            self._emit("cycle", bench)

        self._emit("complete", self)
        return self
