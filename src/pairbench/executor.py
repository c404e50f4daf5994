"""Benchmark specs and their pairwise execution.

A spec is written as a short sequence::

    [config, trial]               # one trial for both subjects
    [config, left_trial, right_trial]

``config`` holds timing options for this spec only (see
:class:`pairbench.timing.TimingConfig`).  Trials receive the subject as
first argument, followed by whatever the timing engine passes (a
:class:`pairbench.timing.Deferred` token in deferred mode)::

    specs = {
        "map/small": [{}, lambda lib: lib.map(inc, small)],
        "map/async": [{"defer": True}, lambda lib, d: lib.submit(d.resolve)],
    }

:class:`SingleFn` and :class:`PairedFn` can be used instead of plain
sequences.  Every form is normalized into a :class:`Trial` when the
runner is created.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from pairbench.timing import MeasurementResult, Suite

log = logging.getLogger("pairbench")

TrialFn = Callable[..., Any]


class SpecError(ValueError):
    """A benchmark spec does not have a valid shape."""


# ---------------------------------------------------------------------------
# Spec forms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleFn:
    """One trial function used for both subjects."""

    config: Mapping[str, Any]
    fn: TrialFn


@dataclass(frozen=True)
class PairedFn:
    """Separate trial functions for the left and right subjects."""

    config: Mapping[str, Any]
    left_fn: TrialFn
    right_fn: TrialFn


@dataclass(frozen=True)
class Trial:
    """Normalized spec: per-spec config plus one function per side."""

    left_fn: TrialFn
    right_fn: TrialFn
    config: Mapping[str, Any] = field(default_factory=dict)


Spec = Union[SingleFn, PairedFn, Trial, Sequence[Any]]


def normalize_spec(name: str, spec: Spec) -> Trial:
    """Resolve any spec form into a Trial.

    For sequences the last element is the right trial; a three-element
    sequence puts the left trial in the middle.

    Raises:
        SpecError: If the spec is not a 2- or 3-element sequence with a
            mapping first and callables after it.
    """
    if isinstance(spec, Trial):
        return spec
    if isinstance(spec, SingleFn):
        config, left, right = spec.config, spec.fn, spec.fn
    elif isinstance(spec, PairedFn):
        config, left, right = spec.config, spec.left_fn, spec.right_fn
    elif isinstance(spec, Sequence) and not isinstance(spec, (str, bytes)):
        if len(spec) not in (2, 3):
            raise SpecError(
                f"Spec '{name}' must have 2 or 3 elements "
                f"([config, fn] or [config, left_fn, right_fn]), got {len(spec)}."
            )
        config, right = spec[0], spec[-1]
        left = spec[1] if len(spec) == 3 else right
    else:
        raise SpecError(f"Spec '{name}' must be a sequence, got {type(spec).__name__}.")

    if not isinstance(config, Mapping):
        raise SpecError(f"Spec '{name}': config must be a mapping, got {type(config).__name__}.")
    for side, fn in (("left", left), ("right", right)):
        if not callable(fn):
            raise SpecError(f"Spec '{name}': {side} trial is not callable.")

    return Trial(left_fn=left, right_fn=right, config=dict(config))


# ---------------------------------------------------------------------------
# Pairwise execution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PairResult:
    """Measurements of one spec for both subjects."""

    left: MeasurementResult
    right: MeasurementResult


def _bind(fn: TrialFn, subject: Any) -> Callable[..., None]:
    def call(*args: Any) -> None:
        fn(subject, *args)

    return call


def build_suite(
    name: str,
    trial: Trial,
    left: Any,
    right: Any,
    shared_config: Mapping[str, Any],
) -> Suite:
    """Build the two-member suite for one spec.

    Per-spec config wins over *shared_config*.  The left member is
    always added first.
    """
    suite = Suite(name)
    suite.add("left", {**shared_config, **trial.config, "fn": _bind(trial.left_fn, left)})
    suite.add("right", {**shared_config, **trial.config, "fn": _bind(trial.right_fn, right)})
    return suite


def execute_pair(
    name: str,
    trial: Trial,
    left: Any,
    right: Any,
    shared_config: Mapping[str, Any],
) -> PairResult | None:
    """Measure *trial* against both subjects, left first.

    Returns:
        The PairResult once the suite completes, or None if an
        ``on_error`` hook handled a trial failure and aborted the suite.

    Raises:
        TrialError: If a trial fails and no ``on_error`` hook is set.
    """
    outcome: list[PairResult] = []

    def on_complete(suite: Suite) -> None:
        left_result, right_result = suite[0].result, suite[1].result
        assert left_result is not None and right_result is not None
        outcome.append(PairResult(left=left_result, right=right_result))

    suite = build_suite(name, trial, left, right, shared_config)
    suite.on("complete", on_complete)
    log.debug("Running spec '%s'", name)
    suite.run()

    return outcome[0] if outcome else None
