"""
JSON reporter for test results.
"""

import json
from typing import List

from ..models import Report
from ..results import aggregate_reports
from .base import ReportGenerator


class JSONReporter(ReportGenerator):
    """Generate JSON format for programmatic analysis."""

    def generate(self, reports: List[Report]) -> str:
        """Generate JSON report."""
        summary = aggregate_reports(reports)
        report = {
            "summary": {
                "passed": summary.passed,
                "failed": summary.failed,
                "skipped": summary.skipped,
                "total": summary.total,
                "success": summary.success,
            },
            "reports": [r.to_dict() for r in reports],
        }

        return json.dumps(report, indent=2)
