"""
Reporting modules for criterion-stream.
"""

from .base import ReportGenerator
from .console import ConsoleReporter, VerboseReporter
from .json_reporter import JSONReporter
from .junit import JUnitReporter

_REPORTERS = {
    "minimal": ConsoleReporter,
    "verbose": VerboseReporter,
    "json": JSONReporter,
    "junit": JUnitReporter,
}


def get_reporter(format_name: str) -> ReportGenerator:
    """
    Return a reporter instance for a report format name.

    Raises:
        ValueError: If the format is unknown
    """
    try:
        return _REPORTERS[format_name]()
    except KeyError:
        raise ValueError(
            f"Unknown report format '{format_name}'. "
            f"Available formats: {', '.join(_REPORTERS)}"
        )


__all__ = [
    "ReportGenerator",
    "ConsoleReporter",
    "VerboseReporter",
    "JSONReporter",
    "JUnitReporter",
    "get_reporter",
]
