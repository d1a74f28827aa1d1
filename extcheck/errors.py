"""Exception taxonomy for the checker."""

from __future__ import annotations

from typing import Optional


class ExtcheckError(Exception):
    """Base class for every error raised by the checker itself."""


class ConfigurationError(ExtcheckError):
    """Raised before the run starts when the checker cannot be set up.

    Missing or duplicate manifest, an empty rule set, a rule module that does
    not satisfy the rule contract and an invalid configuration file all end up
    here. It always aborts the run.
    """


class ScanError(ExtcheckError):
    """A file listed during the tree walk could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ExtractionError(ExtcheckError):
    """Source text could not be scanned for event declarations."""

    def __init__(self, message: str, path: str = "", line: Optional[int] = None) -> None:
        self.message = message
        self.path = path
        self.line = line
        super().__init__(self.__str__())

    def __str__(self) -> str:
        location = self.path or "<source>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"
