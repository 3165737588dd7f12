"""Root of the devkit-graph error hierarchy."""

from typing import Any, Mapping, Optional


class DevkitGraphError(Exception):
    """Any failure devkit-graph reports to its caller.

    ``details`` is printed after the message as ``key=value`` pairs.
    ``exit_code`` is the status a CLI command exits with when this error
    ends it: 1 unless a subclass says otherwise.
    """

    exit_code = 1

    def __init__(self, message: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = {key: str(value) for key, value in (details or {}).items()}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        pairs = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({pairs})"
