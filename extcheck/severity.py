"""Severity definitions for checker messages."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Enumerate the supported severity levels for messages."""

    NOTICE = "NOTICE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"

    @property
    def rank(self) -> int:
        """Return the position of the severity in NOTICE < WARNING < ERROR < FATAL."""

        ordering = {
            Severity.NOTICE: 0,
            Severity.WARNING: 1,
            Severity.ERROR: 2,
            Severity.FATAL: 3,
        }
        return ordering[self]

    @property
    def exit_priority(self) -> int:
        """Return an integer ranking to drive exit code decisions."""

        ordering = {
            Severity.FATAL: 2,
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.NOTICE: 0,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: str) -> "Severity":
        return cls(str(value).strip().upper())
