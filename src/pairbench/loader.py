"""Discovery of benchmark files.

A benchmark file is a Python module that creates one or more runners at
module level::

    # bench/old_vs_new.py
    from pairbench import create_runner

    import mylib_old, mylib

    runner = create_runner(mylib_old, mylib, {}, {
        "parse/small": [{}, lambda lib: lib.parse(SMALL)],
    })
"""

from __future__ import annotations

import hashlib
import importlib.util
import sys
from pathlib import Path

from pairbench.logging import get_logger
from pairbench.runner import Runner

log = get_logger("loader")


def discover_files(paths: list[Path]) -> list[Path]:
    """Expand directories into their ``*.py`` files.

    Directories are scanned non-recursively, in sorted order, skipping
    files whose name starts with ``_``.  Files are kept as given.

    Raises:
        FileNotFoundError: If a path does not exist.
    """
    files: list[Path] = []
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Benchmark path not found: {path}")
        if path.is_dir():
            files.extend(
                p for p in sorted(path.glob("*.py")) if p.is_file() and not p.name.startswith("_")
            )
        else:
            files.append(path)
    return files


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:12]
    return f"pairbench_bench_{path.stem}_{digest}"


def load_module_runners(path: Path) -> list[Runner]:
    """Import *path* and return its module-level runners in definition order.

    Raises:
        ValueError: If the module defines no runner.
    """
    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import benchmark file: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise

    runners: list[Runner] = []
    for value in vars(module).values():
        if isinstance(value, Runner) and all(value is not r for r in runners):
            runners.append(value)
    if not runners:
        raise ValueError(f"No benchmark runner defined in {path}")
    log.debug("Loaded %d runner(s) from %s", len(runners), path)
    return runners


def load_runners(paths: list[Path]) -> list[tuple[Path, Runner]]:
    """Load every runner from the given files and directories."""
    loaded: list[tuple[Path, Runner]] = []
    for path in discover_files(paths):
        loaded.extend((path, runner) for runner in load_module_runners(path))
    return loaded
