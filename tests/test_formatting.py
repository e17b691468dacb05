"""Tests for report formatting."""

import pytest

from criterion_stream.exceptions import ReportStructureError
from criterion_stream.formatting import (
    format_minimal,
    format_verbose,
    get_error_messages,
    print_results,
)
from criterion_stream.models import Report


def _report_dict(name="run"):
    return {
        "quicktest": {"name": name},
        "test_suites": [
            {"name": "suite", "tests": [{"name": "test1", "status": "PASSED"}]},
            {
                "name": "suite",
                "tests": [
                    {"name": "test2", "status": "FAILED", "messages": ["expected 1 got 2"]}
                ],
            },
            {"name": "suite", "tests": [{"name": "test3", "status": "SKIPPED"}]},
        ],
    }


def _multi_failure_dict():
    return {
        "quicktest": {"name": "test_math"},
        "test_suites": [
            {
                "name": "add",
                "tests": [
                    {"name": "a", "status": "FAILED", "messages": ["a1", "a2"]},
                    {"name": "b", "status": "PASSED"},
                    {"name": "c", "status": "FAILED", "messages": ["c1"]},
                ],
            },
            {
                "name": "mul",
                "tests": [
                    {"name": "d", "status": "FAILED"},
                    {"name": "e", "status": "SKIPPED", "messages": ["not run"]},
                    {"name": "f", "status": "FAILED", "messages": ["f1"]},
                ],
            },
        ],
    }


class TestFormatMinimal:
    """Tests for format_minimal."""

    def test_three_suite_example(self):
        assert format_minimal(_report_dict()) == [
            "1/2 OK (run)",
            "",
            "FAILED: suite/test2",
            "  expected 1 got 2",
            "",
        ]

    def test_all_passed(self):
        data = {
            "quicktest": {"name": "test_ok"},
            "test_suites": [{"name": "s", "tests": [{"name": "t", "status": "PASSED"}]}],
        }
        assert format_minimal(data) == ["1/1 OK (test_ok)"]

    def test_failure_without_messages_counted_not_listed(self):
        data = {
            "quicktest": {"name": "r"},
            "test_suites": [{"name": "s", "tests": [{"name": "t", "status": "FAILED"}]}],
        }
        assert format_minimal(data) == ["0/1 OK (r)"]

    def test_other_status_excluded_from_denominator(self):
        data = {
            "quicktest": {"name": "r"},
            "test_suites": [
                {
                    "name": "s",
                    "tests": [
                        {"name": "t1", "status": "PASSED"},
                        {"name": "t2", "status": "ERRORED"},
                    ],
                }
            ],
        }
        assert format_minimal(data) == ["1/1 OK (r)"]

    def test_multiple_failures(self):
        assert format_minimal(_multi_failure_dict()) == [
            "1/5 OK (test_math)",
            "",
            "FAILED: add/a",
            "  a1",
            "  a2",
            "",
            "FAILED: add/c",
            "  c1",
            "",
            "FAILED: mul/f",
            "  f1",
            "",
        ]

    def test_empty_suites(self):
        data = {"quicktest": {"name": "r"}, "test_suites": []}
        assert format_minimal(data) == ["0/0 OK (r)"]

    def test_accepts_report_object(self):
        report = Report.from_dict(_report_dict())
        assert format_minimal(report) == format_minimal(_report_dict())

    def test_missing_suites_fails_fast(self):
        with pytest.raises(ReportStructureError):
            format_minimal({"quicktest": {"name": "r"}})

    def test_missing_name_fails_fast(self):
        with pytest.raises(ReportStructureError) as exc_info:
            format_minimal({"test_suites": []})
        assert exc_info.value.field_path == "quicktest"


class TestFormatVerbose:
    """Tests for format_verbose."""

    def test_transcript(self):
        assert format_verbose(_report_dict()) == [
            "run",
            "  suite",
            "    test1: PASSED",
            "  suite",
            "    test2: FAILED",
            "      expected 1 got 2",
            "",
            "  suite",
        ]

    def test_skipped_tests_never_rendered(self):
        lines = format_verbose(_multi_failure_dict())
        assert not any(line.strip().startswith("e:") for line in lines)
        assert "      not run" not in lines

    def test_filtering_skipped_gives_same_transcript(self):
        data = _multi_failure_dict()
        filtered = {
            "quicktest": data["quicktest"],
            "test_suites": [
                {
                    "name": ts["name"],
                    "tests": [t for t in ts["tests"] if t["status"] != "SKIPPED"],
                }
                for ts in data["test_suites"]
            ],
        }
        assert format_verbose(data) == format_verbose(filtered)

    def test_missing_tests_fails_fast(self):
        data = {"quicktest": {"name": "r"}, "test_suites": [{"name": "s"}]}
        with pytest.raises(ReportStructureError) as exc_info:
            format_verbose(data)
        assert exc_info.value.field_path == "test_suites[0].tests"


class TestGetErrorMessages:
    """Tests for get_error_messages."""

    def test_no_failures(self):
        data = {
            "quicktest": {"name": "r"},
            "test_suites": [
                {
                    "name": "s",
                    "tests": [
                        {"name": "t1", "status": "PASSED"},
                        {"name": "t2", "status": "SKIPPED", "messages": ["skipped"]},
                    ],
                }
            ],
        }
        assert get_error_messages(data) == []

    def test_document_order(self):
        assert get_error_messages(_multi_failure_dict()) == ["a1", "a2", "c1", "f1"]


class TestPrintResults:
    """Tests for print_results."""

    def test_one_stdout_event_per_line(self):
        events = []
        print_results(_report_dict(), events.append)
        assert events == [{"type": "stdout", "output": line} for line in format_minimal(_report_dict())]
