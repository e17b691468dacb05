"""
Report aggregation and utilities.
"""

from typing import Any, Iterable

from .models import FailedTest, Report, ReportSummary


def summarize(report: Any) -> ReportSummary:
    """
    Count the tests of a report and collect its listed failures.

    Args:
        report: Report or decoded report dict

    Returns:
        ReportSummary; failed tests without messages are counted but not
        listed
    """
    report = Report.coerce(report)
    passed = failed = skipped = 0
    failures = []

    for ts in report.test_suites:
        for test in ts.tests:
            if test.passed:
                passed += 1
            elif test.failed:
                failed += 1
                if test.messages:
                    failures.append(FailedTest(ts.name, test.name, list(test.messages)))
            else:
                skipped += 1

    return ReportSummary(passed=passed, failed=failed, skipped=skipped, failures=failures)


def aggregate_reports(reports: Iterable[Any]) -> ReportSummary:
    """
    Aggregate the reports of one session into a single summary.

    Args:
        reports: Reports or decoded report dicts

    Returns:
        ReportSummary with combined counts and failures in stream order
    """
    total = ReportSummary(passed=0, failed=0, skipped=0)
    for report in reports:
        summary = summarize(report)
        total.passed += summary.passed
        total.failed += summary.failed
        total.skipped += summary.skipped
        total.failures.extend(summary.failures)
    return total
