"""
Text views of a decoded report.

All functions accept a :class:`Report` or the decoded report dict and raise
``ReportStructureError`` on malformed input instead of rendering nothing.
"""

from typing import Any, Callable, Dict, List

from .models import RenderEvent, Report
from .results import summarize


def format_verbose(report: Any) -> List[str]:
    """
    Render every suite and every non-skipped test with its messages.

    Args:
        report: Report or decoded report dict

    Returns:
        Transcript lines
    """
    report = Report.coerce(report)
    formatted = [report.name]

    for ts in report.test_suites:
        formatted.append("  " + ts.name)
        for test in ts.tests:
            if test.skipped:
                continue
            formatted.append(f"    {test.name}: {test.status}")
            for msg in test.messages or []:
                formatted.append("      " + msg)
                formatted.append("")

    return formatted


def format_minimal(report: Any) -> List[str]:
    """
    Render a pass/fail header followed by the messages of failed tests.

    The header denominator excludes skipped tests. Failed tests without
    messages count in the header but get no block.

    Args:
        report: Report or decoded report dict

    Returns:
        Summary lines
    """
    report = Report.coerce(report)
    summary = summarize(report)
    formatted = [f"{summary.passed}/{summary.total} OK ({report.name})"]

    for i, failure in enumerate(summary.failures):
        if i == 0:
            formatted.append("")
        formatted.append(f"FAILED: {failure.suite}/{failure.name}")
        for msg in failure.messages:
            formatted.append("  " + msg)
        formatted.append("")

    return formatted


def get_error_messages(report: Any) -> List[str]:
    """
    Collect every message of every failed test.

    Args:
        report: Report or decoded report dict

    Returns:
        Messages in suite, test, message order
    """
    report = Report.coerce(report)
    errors = []
    for ts in report.test_suites:
        for test in ts.tests:
            if test.failed and test.messages:
                errors.extend(test.messages)
    return errors


def print_results(report: Any, send: Callable[[Dict[str, Any]], None]) -> None:
    """Send the minimal summary of ``report`` as one stdout event per line."""
    for line in format_minimal(report):
        send(RenderEvent("stdout", output=line).to_dict())
