"""
Data models for criterion-stream.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ReportStructureError


class TestStatus(str, Enum):
    """Well-known statuses reported by Criterion.

    Test cases keep their status as a plain string so that any other
    runner-defined status survives decoding.
    """

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass
class CaptureContext:
    """Per-invocation state of the stream capture.

    ``buffer`` holds the most recent non-JSON line while searching for the
    test name, and the accumulated document text while ``reading_json``.
    """

    reading_json: bool = False
    buffer: str = ""
    test_name: Optional[str] = None


def _require(data: Any, key: str, kind: type, path: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise ReportStructureError(path)
    value = data[key]
    if not isinstance(value, kind):
        raise ReportStructureError(path, f"not a {kind.__name__}")
    return value


@dataclass(frozen=True)
class TestCase:
    """A single test within a suite."""

    name: str
    status: str
    messages: Optional[Tuple[str, ...]] = None

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED.value

    @property
    def failed(self) -> bool:
        return self.status == TestStatus.FAILED.value

    @property
    def skipped(self) -> bool:
        return self.status == TestStatus.SKIPPED.value


@dataclass(frozen=True)
class TestSuite:
    """A named group of tests, in document order."""

    name: str
    tests: Tuple[TestCase, ...] = ()


@dataclass(frozen=True)
class Report:
    """Decoded Criterion report annotated with the run name.

    Suites, tests and messages are tuples and ``raw`` is a private deep copy
    of the decoded document, so a report never changes after construction.
    """

    name: str
    test_suites: Tuple[TestSuite, ...]
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        """
        Build a report from the decoded wire shape.

        Args:
            data: Decoded JSON document including the injected ``quicktest``
                field

        Returns:
            Report instance

        Raises:
            ReportStructureError: If a documented field is missing or has the
                wrong type
        """
        quicktest = _require(data, "quicktest", dict, "quicktest")
        name = _require(quicktest, "name", str, "quicktest.name")

        suites = []
        for i, ts in enumerate(_require(data, "test_suites", list, "test_suites")):
            suite_path = f"test_suites[{i}]"
            tests = []
            for j, test in enumerate(_require(ts, "tests", list, f"{suite_path}.tests")):
                test_path = f"{suite_path}.tests[{j}]"
                messages = None
                if isinstance(test, dict) and test.get("messages") is not None:
                    messages = _require(test, "messages", list, f"{test_path}.messages")
                    messages = tuple(str(msg) for msg in messages)
                tests.append(
                    TestCase(
                        name=_require(test, "name", str, f"{test_path}.name"),
                        status=_require(test, "status", str, f"{test_path}.status"),
                        messages=messages,
                    )
                )
            suites.append(TestSuite(name=_require(ts, "name", str, f"{suite_path}.name"), tests=tuple(tests)))

        return cls(name=name, test_suites=tuple(suites), raw=copy.deepcopy(data))

    @classmethod
    def coerce(cls, report: Any) -> "Report":
        """Return ``report`` unchanged, or build one from a decoded dict."""
        if isinstance(report, cls):
            return report
        return cls.from_dict(report)

    def to_dict(self) -> Dict[str, Any]:
        """Return the report in its wire shape."""
        suites = []
        for ts in self.test_suites:
            tests = []
            for test in ts.tests:
                entry: Dict[str, Any] = {"name": test.name, "status": test.status}
                if test.messages is not None:
                    entry["messages"] = list(test.messages)
                tests.append(entry)
            suites.append({"name": ts.name, "tests": tests})
        return {"quicktest": {"name": self.name}, "test_suites": suites}


@dataclass
class FailedTest:
    """A FAILED test carrying messages, as listed in the minimal summary."""

    suite: str
    name: str
    messages: List[str] = field(default_factory=list)


@dataclass
class ReportSummary:
    """Aggregated pass/fail counts of one or more reports."""

    passed: int
    failed: int
    skipped: int
    failures: List[FailedTest] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Tests counted in the header; skipped tests are excluded."""
        return self.passed + self.failed

    @property
    def success(self) -> bool:
        """Return True if no test failed."""
        return self.failed == 0


@dataclass
class RenderEvent:
    """A display event forwarded to the caller."""

    type: str
    output: Optional[str] = None
    code: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.type == "exit":
            return {"type": self.type, "code": self.code}
        return {"type": self.type, "output": self.output}


@dataclass
class RunResult:
    """Outcome of one test invocation."""

    reports: List[Report] = field(default_factory=list)
    exit_code: int = 0

    @property
    def failure_messages(self) -> List[str]:
        """Failure messages of every report, in stream order."""
        return [
            msg
            for report in self.reports
            for ts in report.test_suites
            for test in ts.tests
            if test.failed and test.messages
            for msg in test.messages
        ]

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and all(
            not test.failed for r in self.reports for ts in r.test_suites for test in ts.tests
        )
