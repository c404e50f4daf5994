"""Command-line interface for pairbench.

Subcommands:
    pairbench run     Run benchmark files and print comparison tables
    pairbench list    List the spec names a run would select
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from pairbench import __version__
from pairbench.logging import setup_logging
from pairbench.options import load_profile, merge_sources
from pairbench.timing import TrialError

DEFAULT_BENCH_DIR = Path("bench")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Compare two implementations benchmark by benchmark."""


def _load(paths: tuple[Path, ...]) -> list[Any]:
    from pairbench.loader import load_runners

    try:
        return load_runners(list(paths) or [DEFAULT_BENCH_DIR])
    except (FileNotFoundError, ValueError) as exc:
        raise click.UsageError(str(exc)) from exc


def _runner_overrides(runner: Any, overrides: dict[str, Any]) -> dict[str, Any]:
    """Layer the profile and CLI ``config`` keys over the runner's own ``config``."""
    if not isinstance(overrides.get("config"), Mapping):
        return overrides
    return {**overrides, "config": {**runner.defaults.config, **overrides["config"]}}


def _profile_options(profile_path: Path | None) -> dict[str, Any]:
    if profile_path is None:
        return {}
    try:
        return load_profile(profile_path)
    except (FileNotFoundError, ValueError) as exc:
        raise click.UsageError(str(exc)) from exc


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--match", type=str, default=None, help="Glob selecting spec names (default: **).")
@click.option(
    "--colors/--no-colors",
    default=None,
    help="Highlight significant results with terminal colors.",
)
@click.option(
    "--significant-difference",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Difference (0-1) required to flag a result (default: 0.1).",
)
@click.option("--left-header", type=str, default=None, help="Header for the left subject.")
@click.option("--right-header", type=str, default=None, help="Header for the right subject.")
@click.option("--min-samples", type=click.IntRange(min=1), default=None, help="Minimum samples.")
@click.option("--max-time", type=float, default=None, help="Sampling seconds per benchmark.")
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with run options.",
)
@click.option(
    "--json-output",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the report rows to this JSON file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    paths: tuple[Path, ...],
    match: str | None,
    colors: bool | None,
    significant_difference: float | None,
    left_header: str | None,
    right_header: str | None,
    min_samples: int | None,
    max_time: float | None,
    profile_path: Path | None,
    json_output: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Run the benchmark files in PATHS (default: ./bench).

    \b
    Examples:
        pairbench run
        pairbench run bench/map.py --match 'map/*' --no-colors
        pairbench run --profile bench.yaml --significant-difference 0.05
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    cli_options = {
        "match": match,
        "colors": colors,
        "significant_difference": significant_difference,
        "left_header": left_header,
        "right_header": right_header,
        "config": {"min_samples": min_samples, "max_time": max_time},
    }
    overrides = merge_sources(_profile_options(profile_path), cli_options)

    reports: list[dict[str, Any]] = []
    for path, runner in _load(paths):
        try:
            report = runner(_runner_overrides(runner, overrides))
        except TrialError as exc:
            raise click.ClickException(f"{path}: {exc}") from exc
        reports.append({"file": str(path), **report.to_dict()})

    if json_output is not None:
        json_output.write_text(json.dumps(reports, indent=2) + "\n")
        click.echo(f"Report written to {json_output}", err=True)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@main.command(name="list")
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--match", type=str, default=None, help="Glob selecting spec names.")
def list_specs(paths: tuple[Path, ...], match: str | None) -> None:
    """List the spec names in PATHS (default: ./bench)."""
    for _path, runner in _load(paths):
        for name in runner.select(match):
            click.echo(name)
