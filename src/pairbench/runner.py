"""Benchmark run driver.

Usage::

    from pairbench import create_runner

    runner = create_runner(old_lib, new_lib, {"left_header": "old"}, {
        "map/small": [{}, lambda lib: lib.map(inc, small)],
        "map/large": [{}, lambda lib: lib.map(inc, large)],
    })
    report = runner({"match": "map/*"})

Each call of the runner is an independent run:

1. Resolve the effective options (defaults < creation options < call
   overrides).
2. Select the spec names matching ``match``, in spec order.  If none
   match, print a notice, call ``callback`` and stop.
3. For each selected spec, print a progress line, measure both
   subjects, evaluate the difference and append a report row.  Specs run
   strictly one after another.
4. Print the table and call ``callback``.
"""

from __future__ import annotations

import shutil
import sys
import time
from dataclasses import dataclass, field
from typing import IO, Any, Mapping

import click

from pairbench.compare import evaluate
from pairbench.display import ComparisonRow, build_row, report_headers
from pairbench.executor import Spec, Trial, execute_pair, normalize_spec
from pairbench.formatting import format_box_table
from pairbench.logging import get_logger
from pairbench.options import Options, resolve_options
from pairbench.selection import select_specs

log = get_logger("runner")

NO_MATCH_NOTICE = "No benchmarks matched"


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass
class Report:
    """Rows of one run, in selection order."""

    headers: list[str]
    rows: list[ComparisonRow] = field(default_factory=list)
    colors: bool = True

    @property
    def names(self) -> list[str]:
        return [row.name for row in self.rows]

    def render(self) -> str:
        """Render the rows as a box-drawing table."""
        return format_box_table(
            self.headers,
            [row.cells for row in self.rows],
            styled=self.colors,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "headers": list(self.headers),
            "rows": [row.to_dict() for row in self.rows],
        }


@dataclass
class RunState:
    """Progress of one run, owned by :meth:`Runner.__call__`."""

    selected: list[str]
    completed: int = 0
    rows: list[ComparisonRow] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.completed == len(self.selected)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class Runner:
    """Runs named specs against a left and a right subject.

    The subjects, creation options and specs are fixed for the lifetime
    of the runner; every call starts a fresh run.
    """

    def __init__(
        self,
        left: Any,
        right: Any,
        options: Any = None,
        specs: Mapping[str, Spec] | None = None,
        *,
        stream: IO[str] | None = None,
    ) -> None:
        self._left = left
        self._right = right
        self._defaults = resolve_options(options, Options())
        self._specs: dict[str, Trial] = {
            name: normalize_spec(name, spec) for name, spec in (specs or {}).items()
        }
        self._stream = stream

    @property
    def names(self) -> list[str]:
        """Spec names in execution order."""
        return list(self._specs)

    @property
    def defaults(self) -> Options:
        return self._defaults

    def select(self, pattern: str | None = None) -> list[str]:
        """Names matching *pattern* (default: the creation-time ``match``)."""
        return select_specs(self._specs, pattern if pattern is not None else self._defaults.match)

    def __call__(self, overrides: Any = None) -> Report:
        """Run the selected specs and print the report.

        Returns:
            The Report.  If a trial failure was handled by an ``on_error``
            hook, the run stops early, ``callback`` is not called and the
            report holds the rows completed so far.

        Raises:
            TrialError: If a trial fails and no ``on_error`` hook is set.
        """
        opts = resolve_options(overrides, self._defaults)
        out = self._stream or sys.stdout
        report = Report(
            headers=report_headers(opts.left_header, opts.right_header),
            colors=opts.colors,
        )

        state = RunState(selected=select_specs(self._specs, opts.match))
        if not state.selected:
            log.debug("No spec matched pattern %r", opts.match)
            click.echo(NO_MATCH_NOTICE, file=out)
            opts.callback()
            return report

        started = time.monotonic()
        while not state.done:
            if not self._run_next(state, opts, out):
                log.warning(
                    "Run aborted at spec '%s' (%d/%d completed)",
                    state.selected[state.completed],
                    state.completed,
                    len(state.selected),
                )
                report.rows = state.rows
                return report

        report.rows = state.rows
        log.debug("Finished %d spec(s) in %.2fs", state.completed, time.monotonic() - started)
        click.echo(report.render(), file=out, color=opts.colors)
        opts.callback()
        return report

    def _run_next(self, state: RunState, opts: Options, out: IO[str]) -> bool:
        """Run the next spec and record its row.  False if aborted."""
        index = state.completed
        name = state.selected[index]
        total = len(state.selected)

        progress = f"# {index + 1}/{total}: {name}"
        width = shutil.get_terminal_size().columns
        click.echo(f"{progress.ljust(width)}\r", file=out, nl=False)

        pair = execute_pair(name, self._specs[name], self._left, self._right, opts.config)
        if pair is None:
            return False

        significance = evaluate(pair.left.rate, pair.right.rate, opts.significant_difference)
        state.rows.append(
            build_row(name, pair.left, pair.right, significance, colors=opts.colors)
        )
        state.completed += 1
        return True


def create_runner(
    left: Any,
    right: Any,
    options: Any = None,
    specs: Mapping[str, Spec] | None = None,
    *,
    stream: IO[str] | None = None,
) -> Runner:
    """Create a reusable runner comparing *left* with *right*.

    Args:
        left: The left subject, usually the baseline implementation.
        right: The right subject, usually the implementation under work.
        options: Defaults for every run.  Recognized keys: ``callback``,
            ``colors``, ``config``, ``left_header``, ``match``,
            ``right_header``, ``significant_difference``.
        specs: Mapping of spec name to spec; its order is the run order.
        stream: Output stream; defaults to ``sys.stdout`` at call time.

    Raises:
        SpecError: If a spec is malformed.
    """
    return Runner(left, right, options, specs, stream=stream)
