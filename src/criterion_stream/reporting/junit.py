"""
JUnit XML reporter for test results.
"""

import xml.etree.ElementTree as ET
from typing import List

from ..models import Report
from .base import ReportGenerator


class JUnitReporter(ReportGenerator):
    """Generate JUnit XML format for CI/CD integration."""

    def generate(self, reports: List[Report]) -> str:
        """Generate JUnit XML report."""
        testsuites = ET.Element("testsuites")

        for report in reports:
            for ts in report.test_suites:
                suite_name = f"{report.name}/{ts.name}" if report.name else ts.name
                testsuite = ET.SubElement(testsuites, "testsuite")
                testsuite.set("name", suite_name)
                testsuite.set("tests", str(len(ts.tests)))
                testsuite.set("failures", str(sum(1 for t in ts.tests if t.failed)))
                testsuite.set("skipped", str(sum(1 for t in ts.tests if t.skipped)))
                testsuite.set(
                    "errors",
                    str(sum(1 for t in ts.tests if not (t.passed or t.failed or t.skipped))),
                )

                for test in ts.tests:
                    testcase = ET.SubElement(testsuite, "testcase")
                    testcase.set("classname", suite_name)
                    testcase.set("name", test.name)

                    if test.failed:
                        messages = test.messages or []
                        failure = ET.SubElement(testcase, "failure")
                        failure.set("message", messages[0] if messages else "FAILED")
                        failure.text = "\n".join(messages)
                    elif test.skipped:
                        ET.SubElement(testcase, "skipped")
                    elif not test.passed:
                        error = ET.SubElement(testcase, "error")
                        error.set("message", test.status)

        ET.indent(testsuites, space="  ")
        return ET.tostring(testsuites, encoding="unicode", xml_declaration=True)
