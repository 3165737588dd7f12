"""Base formatter interface for devkit-graph output rendering."""

from abc import ABC, abstractmethod

from ..architecture.models import ArchitectureReport


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    def render(self, report: ArchitectureReport) -> None:
        """Write the formatted report to stdout."""
        print(self.format(report))

    @abstractmethod
    def format(self, report: ArchitectureReport) -> str:
        """Return formatted string representation of the report."""
