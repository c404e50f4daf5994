"""Tests for pairbench.timing: the micro-benchmark timing engine."""

from __future__ import annotations

import threading
import time
import unittest

from bench_test_helpers import FAST_CONFIG

from pairbench.timing import (
    Benchmark,
    Deferred,
    MeasurementResult,
    Suite,
    TimingConfig,
    TrialError,
)


def _busy_wait(seconds: float) -> None:
    end = time.perf_counter() + seconds
    while time.perf_counter() < end:
        pass


class TestTimingConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = TimingConfig()
        self.assertEqual(cfg.min_samples, 5)
        self.assertFalse(cfg.defer)
        self.assertIsNone(cfg.on_error)

    def test_from_mapping_ignores_unknown_keys(self) -> None:
        cfg = TimingConfig.from_mapping({"min_samples": 3, "fn": print, "bogus": 1})
        self.assertEqual(cfg.min_samples, 3)


class TestDeferred(unittest.TestCase):
    def test_resolve(self) -> None:
        d = Deferred()
        self.assertFalse(d.resolved)
        d.resolve()
        self.assertTrue(d.resolved)
        self.assertTrue(d.wait(0))

    def test_wait_times_out(self) -> None:
        self.assertFalse(Deferred().wait(0.001))


class TestBenchmark(unittest.TestCase):
    """Tests for Benchmark.run()."""

    def test_collects_min_samples(self) -> None:
        bench = Benchmark("noop", lambda: None, TimingConfig(**{**FAST_CONFIG, "min_samples": 4}))
        result = bench.run()
        self.assertIs(bench.result, result)
        self.assertGreaterEqual(result.sample_size, 4)
        self.assertGreater(result.rate, 0)
        self.assertGreaterEqual(result.relative_margin_of_error, 0)

    def test_calibrates_call_count(self) -> None:
        calls = []
        bench = Benchmark(
            "count",
            lambda: calls.append(1),
            TimingConfig(min_samples=1, min_time=0.002, max_time=0.0),
        )
        bench.run()
        # A sub-microsecond call needs many calls to fill 2ms.
        self.assertGreater(len(calls), 10)

    def test_slow_function_has_lower_rate(self) -> None:
        cfg = TimingConfig(**FAST_CONFIG)
        fast = Benchmark("fast", lambda: None, cfg).run()
        slow = Benchmark("slow", lambda: _busy_wait(0.001), cfg).run()
        self.assertGreater(fast.rate, slow.rate)
        self.assertLess(slow.rate, 1100)

    def test_exception_becomes_trial_error(self) -> None:
        def boom() -> None:
            raise KeyError("missing")

        bench = Benchmark("boom", boom, TimingConfig(**FAST_CONFIG))
        with self.assertRaises(TrialError) as ctx:
            bench.run()
        self.assertEqual(ctx.exception.benchmark, "boom")
        self.assertIsInstance(ctx.exception.cause, KeyError)

    def test_deferred_mode_passes_token(self) -> None:
        seen: list[Deferred] = []

        def trial(deferred: Deferred) -> None:
            seen.append(deferred)
            threading.Timer(0.0005, deferred.resolve).start()

        bench = Benchmark("deferred", trial, TimingConfig(**FAST_CONFIG, defer=True))
        result = bench.run()
        self.assertEqual(len(seen), result.sample_size)
        self.assertTrue(all(d.resolved for d in seen))

    def test_deferred_timeout(self) -> None:
        bench = Benchmark(
            "never",
            lambda deferred: None,
            TimingConfig(defer=True, defer_timeout=0.01, min_samples=1),
        )
        with self.assertRaises(TrialError) as ctx:
            bench.run()
        self.assertIsInstance(ctx.exception.cause, TimeoutError)


class TestMeasurementResult(unittest.TestCase):
    def test_to_dict(self) -> None:
        data = MeasurementResult(rate=10.0, relative_margin_of_error=1.23456, sample_size=3).to_dict()
        self.assertEqual(data, {"rate": 10.0, "relative_margin_of_error": 1.2346, "sample_size": 3})


class TestSuite(unittest.TestCase):
    """Tests for Suite ordering, events and errors."""

    def test_runs_in_order_and_completes_once(self) -> None:
        order: list[str] = []
        completed: list[Suite] = []
        suite = Suite("s")
        suite.add("left", {**FAST_CONFIG, "fn": lambda: order.append("left")})
        suite.add("right", {**FAST_CONFIG, "fn": lambda: order.append("right")})
        suite.on("complete", completed.append)
        suite.run()

        self.assertEqual(completed, [suite])
        first_right = order.index("right")
        self.assertNotIn("left", order[first_right:])
        self.assertEqual([b.name for b in suite], ["left", "right"])
        self.assertIsNotNone(suite[0].result)
        self.assertIsNotNone(suite[1].result)

    def test_cycle_event_per_benchmark(self) -> None:
        cycles: list[str] = []
        suite = Suite("s")
        suite.add("a", {**FAST_CONFIG, "fn": lambda: None})
        suite.add("b", {**FAST_CONFIG, "fn": lambda: None})
        suite.on("cycle", lambda bench: cycles.append(bench.name))
        suite.run()
        self.assertEqual(cycles, ["a", "b"])

    def test_add_requires_callable(self) -> None:
        with self.assertRaises(ValueError):
            Suite("s").add("x", {"fn": 3})

    def test_unknown_event(self) -> None:
        with self.assertRaises(ValueError):
            Suite("s").on("finish", print)

    def test_error_without_hook_propagates(self) -> None:
        suite = Suite("s")
        suite.add("bad", {**FAST_CONFIG, "fn": lambda: 1 / 0})
        with self.assertRaises(TrialError):
            suite.run()
        self.assertTrue(suite.aborted)

    def test_error_with_hook_aborts(self) -> None:
        handled: list[TrialError] = []
        errors: list[TrialError] = []
        completed: list[Suite] = []
        right_calls: list[int] = []

        suite = Suite("s")
        suite.add("left", {**FAST_CONFIG, "fn": lambda: 1 / 0, "on_error": handled.append})
        suite.add("right", {**FAST_CONFIG, "fn": lambda: right_calls.append(1)})
        suite.on("error", errors.append)
        suite.on("complete", completed.append)
        suite.run()

        self.assertTrue(suite.aborted)
        self.assertEqual(len(handled), 1)
        self.assertIs(errors[0], handled[0])
        self.assertIsInstance(handled[0].cause, ZeroDivisionError)
        self.assertIs(suite[0].error, handled[0])
        self.assertEqual(completed, [])
        self.assertEqual(right_calls, [])
