"""
Line-oriented capture of Criterion JSON reports from meson test output.

Criterion pretty-prints its ``--json`` report with the document's own opening
and closing braces alone at the start of a line, so document boundaries are
detected by the first character of each line. Compact JSON output would break
this detection.

The report does not carry the test name. When meson runs every test of a
project the output looks like::

    1/1 my_suite/my_test OK
    ――――――――――――――――――――――――― ✀  ―――――――――――――――――――――――――
    {
      ...
    }

and the name is taken from the banner line read just before the scissor
marker. Output of several tests interleaved in one stream is not supported.
"""

import json
import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from .exceptions import CaptureSpentError, ReportDecodeError
from .models import CaptureContext, Report

logger = logging.getLogger(__name__)

MARKER = "✀ "


def split_words(text: str, sep: Optional[str] = None) -> List[str]:
    """Split ``text`` on ``sep`` (any whitespace by default), dropping empty parts."""
    return [part for part in text.split(sep) if part]


def extract_test_name(banner_line: str) -> Optional[str]:
    """
    Return the test name from a meson banner line.

    Args:
        banner_line: Line shaped like ``"<index> <name> <status>"``

    Returns:
        The second whitespace-delimited token, or None if there is none
    """
    parts = split_words(banner_line)
    if len(parts) < 2:
        return None
    return parts[1]


def feed(
    ctx: CaptureContext, line: str, test_name: str = ""
) -> Tuple[bool, Optional[Report]]:
    """
    Feed one output line to the capture state machine.

    Must be called for every line, in the order the process produced them.

    Args:
        ctx: Capture context owned by the current test invocation
        line: Raw output line without trailing newline
        test_name: Name known ahead of time (single-test runs), or "" to
            discover it from the stream

    Returns:
        Tuple of (document ready, report). The report is only set when the
        line closed a JSON document.

    Raises:
        ReportDecodeError: If the closed document is not valid JSON
        ReportStructureError: If the document lacks a documented field
    """
    if test_name:
        ctx.test_name = test_name

    if ctx.test_name is None and not ctx.reading_json:
        if MARKER in line:
            ctx.test_name = extract_test_name(ctx.buffer)
            logger.debug("Discovered test name %r from %r", ctx.test_name, ctx.buffer)
        else:
            # Candidate banner line for the next marker
            ctx.buffer = line

    if line.startswith("{"):
        logger.debug("Entering JSON report")
        ctx.reading_json = True
        ctx.buffer = ""

    if ctx.reading_json:
        ctx.buffer += line + "\n"

    if line.startswith("}"):
        if not ctx.reading_json:
            logger.debug("Ignoring closing brace outside a report: %r", line)
            return False, None

        ctx.reading_json = False
        try:
            data = json.loads(ctx.buffer)
        except json.JSONDecodeError as e:
            raise ReportDecodeError(ctx.buffer, e) from e

        if ctx.test_name is None:
            logger.warning("Report closed without a test name")
        if isinstance(data, dict):
            data["quicktest"] = {"name": ctx.test_name or ""}
        ctx.test_name = None
        report = Report.from_dict(data)
        logger.debug("Captured report %r with %d suites", report.name, len(report.test_suites))
        return True, report

    return False, None


class StreamCapture:
    """Owns the capture context of one test invocation."""

    def __init__(self) -> None:
        self.context = CaptureContext()
        self.spent = False

    def feed(self, line: str, test_name: str = "") -> Tuple[bool, Optional[Report]]:
        """
        Feed one line; see :func:`feed`.

        Raises:
            CaptureSpentError: If a previous line raised a report error
        """
        if self.spent:
            raise CaptureSpentError()
        try:
            return feed(self.context, line, test_name)
        except Exception:
            self.spent = True
            raise

    def iter_reports(self, lines: Iterable[str], test_name: str = "") -> Iterator[Report]:
        """Yield every report found in ``lines``."""
        for line in lines:
            done, report = self.feed(line.rstrip("\r\n"), test_name)
            if done and report is not None:
                yield report


def capture_all(lines: Iterable[str], test_name: str = "") -> List[Report]:
    """Capture every report of a complete output stream."""
    return list(StreamCapture().iter_reports(lines, test_name))
