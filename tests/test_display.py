"""Tests for pairbench.display: report rows."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_result

from pairbench.compare import Verdict, evaluate
from pairbench.display import (
    ComparisonRow,
    build_row,
    format_measurement,
    format_pct,
    highlighter,
    report_headers,
)

GREEN = "\x1b[32m"
RED = "\x1b[31m"
RESET = "\x1b[0m"


class TestFormatMeasurement(unittest.TestCase):
    def test_grouping_and_precision(self) -> None:
        result = make_result(1234567.89, rme=0.5678, sample_size=42)
        self.assertEqual(format_measurement(result), "1,234,568 Hz ±0.57% (n 42)")

    def test_thousand_has_separator(self) -> None:
        self.assertIn(",", format_measurement(make_result(1000.0)))

    def test_rate_half_rounds_up(self) -> None:
        self.assertTrue(format_measurement(make_result(1000.5)).startswith("1,001 Hz"))

    def test_rme_half_rounds_up(self) -> None:
        self.assertIn("±1.13%", format_measurement(make_result(10.0, rme=1.125)))

    def test_small_rate(self) -> None:
        self.assertEqual(
            format_measurement(make_result(12.4, rme=3.0, sample_size=5)),
            "12 Hz ±3.00% (n 5)",
        )


class TestFormatPct(unittest.TestCase):
    def test_unsigned_padding(self) -> None:
        self.assertEqual(format_pct(12.34), "012.3%")

    def test_half_rounds_away_from_zero(self) -> None:
        self.assertEqual(format_pct(12.25), "012.3%")
        self.assertEqual(format_pct(-12.25, signed=True), "-012.3%")

    def test_infinite_change(self) -> None:
        text = format_pct(float("inf"), signed=True)
        self.assertTrue(text.startswith("+"))
        self.assertIn("inf", text)

    def test_unsigned_uses_magnitude(self) -> None:
        self.assertEqual(format_pct(-7.0), "007.0%")

    def test_unsigned_large(self) -> None:
        self.assertEqual(format_pct(1234.56), "1234.6%")

    def test_signed_positive(self) -> None:
        self.assertEqual(format_pct(50.0, signed=True), "+050.0%")

    def test_signed_zero(self) -> None:
        self.assertEqual(format_pct(0.0, signed=True), "+000.0%")

    def test_signed_negative(self) -> None:
        self.assertEqual(format_pct(-33.333, signed=True), "-033.3%")


class TestHighlighter(unittest.TestCase):
    def test_improvement_green(self) -> None:
        self.assertEqual(highlighter(Verdict.IMPROVEMENT, True)("x"), f"{GREEN}x{RESET}")

    def test_regression_red(self) -> None:
        self.assertEqual(highlighter(Verdict.REGRESSION, True)("x"), f"{RED}x{RESET}")

    def test_none_plain(self) -> None:
        self.assertEqual(highlighter(Verdict.NONE, True)("x"), "x")

    def test_colors_disabled(self) -> None:
        self.assertEqual(highlighter(Verdict.IMPROVEMENT, False)("x"), "x")


class TestBuildRow(unittest.TestCase):
    """Tests for build_row() and ComparisonRow."""

    def test_improvement_row(self) -> None:
        left, right = make_result(100.0), make_result(150.0)
        row = build_row("map/small", left, right, evaluate(100.0, 150.0, 0.1), colors=True)
        self.assertEqual(row.name, "map/small")
        self.assertEqual(row.left, "100 Hz ±1.50% (n 10)")
        self.assertEqual(row.right, "150 Hz ±1.50% (n 10)")
        self.assertEqual(row.diff, "020.0%")
        self.assertEqual(row.change, "+050.0%")
        self.assertEqual(row.marker, "✓")
        self.assertIs(row.verdict, Verdict.IMPROVEMENT)
        self.assertIs(row.left_result, left)
        cells = row.cells
        self.assertEqual(cells[4], f"{GREEN}+050.0%{RESET}")
        self.assertEqual(cells[5], f"{GREEN}✓{RESET}")
        self.assertEqual(cells[3], "020.0%")

    def test_regression_row(self) -> None:
        row = build_row(
            "x", make_result(150.0), make_result(100.0), evaluate(150.0, 100.0, 0.1), colors=True
        )
        self.assertEqual(row.change, "-033.3%")
        self.assertEqual(row.cells[5], f"{RED}✗{RESET}")

    def test_insignificant_row(self) -> None:
        row = build_row(
            "x", make_result(100.0), make_result(101.0), evaluate(100.0, 101.0, 0.5), colors=True
        )
        self.assertEqual(row.marker, "")
        self.assertEqual(row.cells[4], "+001.0%")
        self.assertEqual(row.cells[5], "")

    def test_no_colors(self) -> None:
        row = build_row(
            "x", make_result(100.0), make_result(150.0), evaluate(100.0, 150.0, 0.1), colors=False
        )
        self.assertEqual(row.cells, [row.name, row.left, row.right, "020.0%", "+050.0%", "✓"])

    def test_to_dict(self) -> None:
        row = build_row(
            "x", make_result(100.0), make_result(150.0), evaluate(100.0, 150.0, 0.1), colors=True
        )
        data = row.to_dict()
        self.assertEqual(data["verdict"], "improvement")
        self.assertEqual(data["change"], "+050.0%")
        self.assertEqual(data["left_result"]["rate"], 100.0)

    def test_row_without_results(self) -> None:
        row = ComparisonRow("x", "a", "b", "000.0%", "+000.0%", "", Verdict.NONE)
        self.assertNotIn("left_result", row.to_dict())


class TestReportHeaders(unittest.TestCase):
    def test_headers(self) -> None:
        self.assertEqual(
            report_headers("old", "new"),
            ["suite", "old", "new", "diff", "change", "α"],
        )
