"""
Streaming capture of Criterion test reports from meson test output.
"""

from .capture import StreamCapture, feed
from .formatting import format_minimal, format_verbose, get_error_messages
from .models import CaptureContext, Report, TestStatus

__all__ = [
    "CaptureContext",
    "Report",
    "StreamCapture",
    "TestStatus",
    "feed",
    "format_minimal",
    "format_verbose",
    "get_error_messages",
]
