"""Tests for the stream capture state machine."""

import json

import pytest

from criterion_stream.capture import (
    MARKER,
    StreamCapture,
    capture_all,
    extract_test_name,
    feed,
    split_words,
)
from criterion_stream.exceptions import (
    CaptureSpentError,
    ReportDecodeError,
    ReportError,
    ReportStructureError,
)
from criterion_stream.models import CaptureContext

REPORT_LINES = [
    "{",
    '  "id": "Criterion v2.4.1",',
    '  "passed": 1,',
    '  "test_suites": [',
    "    {",
    '      "name": "math",',
    '      "tests": [',
    '        {"name": "add", "status": "PASSED"}',
    "      ]",
    "    }",
    "  ]",
    "}",
]

BANNER = "1/1 my_suite/my_test OK              0.01s"
MARKER_LINE = "――――――――――――――――――――――――――――― ✀  ―――――――――――――――――――――――――――――"


def _feed_all(ctx, lines, test_name=""):
    return [feed(ctx, line, test_name) for line in lines]


class TestSplitWords:
    """Tests for the splitting helper."""

    def test_whitespace(self):
        assert split_words("1/1  name\tOK") == ["1/1", "name", "OK"]

    def test_separator(self):
        assert split_words("a,,b,", ",") == ["a", "b"]

    def test_empty(self):
        assert split_words("") == []


class TestExtractTestName:
    """Tests for banner line parsing."""

    def test_second_token(self):
        assert extract_test_name(BANNER) == "my_suite/my_test"

    def test_too_short(self):
        assert extract_test_name("single") is None
        assert extract_test_name("") is None


class TestFeed:
    """Tests for feed()."""

    def test_plain_lines_not_ready(self):
        ctx = CaptureContext()
        assert feed(ctx, "ninja: no work to do.") == (False, None)
        assert ctx.buffer == "ninja: no work to do."
        assert ctx.reading_json is False

    def test_ready_exactly_once_on_closing_line(self):
        ctx = CaptureContext()
        results = _feed_all(ctx, ["some banner", *REPORT_LINES, "trailing text"], "test_math")
        ready = [i for i, (done, _) in enumerate(results) if done]
        assert ready == [len(REPORT_LINES)]
        done, report = results[len(REPORT_LINES)]
        assert done is True
        assert report.test_suites[0].name == "math"

    def test_nested_braces_do_not_close(self):
        ctx = CaptureContext()
        _feed_all(ctx, REPORT_LINES[:5])
        assert ctx.reading_json is True
        # "    }" starts with a space, so it is part of the body
        assert feed(ctx, "    }") == (False, None)
        assert ctx.reading_json is True

    def test_opening_line_included_in_buffer(self):
        ctx = CaptureContext()
        feed(ctx, "{")
        assert ctx.buffer == "{\n"

    def test_name_discovered_from_marker(self):
        ctx = CaptureContext()
        lines = [BANNER, MARKER_LINE, *REPORT_LINES]
        results = _feed_all(ctx, lines)
        done, report = results[-1]
        assert done is True
        assert report.name == "my_suite/my_test"
        assert report.raw["quicktest"] == {"name": "my_suite/my_test"}

    def test_minimal_marker_stream(self):
        ctx = CaptureContext()
        lines = [
            "1/1 my_suite/my_test OK",
            "✀ ",
            "{",
            '"quicktest":{}, "test_suites": []',
            "}",
        ]
        done, report = _feed_all(ctx, lines)[-1]
        assert done is True
        assert report.name == "my_suite/my_test"

    def test_only_line_before_marker_matters(self):
        ctx = CaptureContext()
        lines = ["2/3 other_test OK", BANNER, MARKER_LINE, *REPORT_LINES]
        _, report = _feed_all(ctx, lines)[-1]
        assert report.name == "my_suite/my_test"

    def test_known_name_wins_over_marker(self):
        ctx = CaptureContext()
        lines = [BANNER, MARKER_LINE, *REPORT_LINES]
        _, report = _feed_all(ctx, lines, "foo_test")[-1]
        assert report.name == "foo_test"

    def test_name_cleared_after_report(self):
        ctx = CaptureContext()
        _feed_all(ctx, [BANNER, MARKER_LINE, *REPORT_LINES])
        assert ctx.test_name is None
        assert ctx.reading_json is False

    def test_missing_name_degrades_to_empty(self):
        ctx = CaptureContext()
        _, report = _feed_all(ctx, REPORT_LINES)[-1]
        assert report.name == ""

    def test_marker_after_short_line_leaves_name_absent(self):
        ctx = CaptureContext()
        _, report = _feed_all(ctx, ["x", MARKER, *REPORT_LINES])[-1]
        assert report.name == ""

    def test_marker_inside_json_ignored(self):
        ctx = CaptureContext()
        feed(ctx, "{")
        feed(ctx, '  "note": "✀ here",')
        assert ctx.test_name is None
        assert ctx.buffer == '{\n  "note": "✀ here",\n'

    def test_two_reports_sequentially(self):
        ctx = CaptureContext()
        lines = [
            "1/2 first_test OK",
            MARKER_LINE,
            *REPORT_LINES,
            "2/2 second_test FAIL",
            MARKER_LINE,
            *REPORT_LINES,
        ]
        reports = [r for done, r in _feed_all(ctx, lines) if done]
        assert [r.name for r in reports] == ["first_test", "second_test"]

    def test_stray_closing_brace_ignored(self):
        ctx = CaptureContext()
        assert feed(ctx, "} done") == (False, None)
        assert ctx.reading_json is False

    def test_malformed_json_raises(self):
        ctx = CaptureContext()
        feed(ctx, "{")
        feed(ctx, '  "test_suites": [,')
        with pytest.raises(ReportDecodeError) as exc_info:
            feed(ctx, "}")
        assert isinstance(exc_info.value.original_error, json.JSONDecodeError)
        assert isinstance(exc_info.value, ReportError)

    def test_empty_document_is_structure_error(self):
        ctx = CaptureContext()
        feed(ctx, "{")
        with pytest.raises(ReportStructureError) as exc_info:
            feed(ctx, "}")
        assert exc_info.value.field_path == "test_suites"


class TestStreamCapture:
    """Tests for the StreamCapture wrapper."""

    def test_iter_reports_strips_newlines(self):
        lines = [line + "\n" for line in [BANNER, MARKER_LINE, *REPORT_LINES]]
        reports = list(StreamCapture().iter_reports(lines))
        assert len(reports) == 1
        assert reports[0].name == "my_suite/my_test"

    def test_capture_all_with_known_name(self):
        reports = capture_all(REPORT_LINES, "test_math")
        assert [r.name for r in reports] == ["test_math"]

    def test_no_report_when_stream_ends_early(self):
        assert capture_all(REPORT_LINES[:-1]) == []

    def test_spent_after_error(self):
        capture = StreamCapture()
        capture.feed("{")
        with pytest.raises(ReportStructureError):
            capture.feed("}")
        assert capture.spent is True
        with pytest.raises(CaptureSpentError):
            capture.feed("more output")

    def test_independent_contexts(self):
        first = StreamCapture()
        second = StreamCapture()
        first.feed("{")
        assert first.context.reading_json is True
        assert second.context.reading_json is False
