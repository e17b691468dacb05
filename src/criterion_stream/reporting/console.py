"""
Console reporters for test results.
"""

import os
from typing import IO, List, Optional

import click

from ..formatting import format_minimal, format_verbose
from ..models import Report
from ..results import aggregate_reports, summarize
from .base import ReportGenerator


def _supports_color(stream: Optional[IO[str]] = None) -> bool:
    """Return True if ``stream`` (click's stdout by default) should get ANSI colours."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = click.get_text_stream("stdout")
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ConsoleReporter(ReportGenerator):
    """Generate the minimal pass/fail summary of each report."""

    def __init__(self, color: Optional[bool] = None) -> None:
        self.color = _supports_color() if color is None else color

    def _style(self, text: str, fg: str, bold: bool = False) -> str:
        if not self.color:
            return text
        return click.style(text, fg=fg, bold=bold)

    def generate(self, reports: List[Report]) -> str:
        """Generate console report."""
        lines = []

        for report in reports:
            header_color = "bright_green" if summarize(report).success else "bright_red"
            for i, line in enumerate(format_minimal(report)):
                if i == 0:
                    lines.append(self._style(line, header_color, bold=True))
                elif line.startswith("FAILED: "):
                    lines.append(self._style(line, "bright_red"))
                else:
                    lines.append(line)

        if not reports:
            lines.append("No test report captured")
        elif len(reports) > 1:
            total = aggregate_reports(reports)
            color = "bright_green" if total.success else "bright_red"
            lines.append(self._style(f"{total.passed}/{total.total} OK (all)", color, bold=True))

        return "\n".join(lines)


class VerboseReporter(ReportGenerator):
    """Generate the full transcript of each report."""

    def generate(self, reports: List[Report]) -> str:
        """Generate verbose report."""
        lines: List[str] = []
        for report in reports:
            lines.extend(format_verbose(report))
        return "\n".join(lines)
