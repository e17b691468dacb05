"""
Base class for report generators.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import Report


class ReportGenerator(ABC):
    """Base class for generating test reports."""

    @abstractmethod
    def generate(self, reports: List[Report]) -> str:
        """
        Generate a report from captured test reports.

        Args:
            reports: Reports captured from one test invocation

        Returns:
            Report as a string
        """
        pass
