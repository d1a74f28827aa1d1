"""Core result data structures for the checker.

``ScanResult`` is the output sink every rule writes to. It keeps an
append-only list of messages plus the progress accounting used to report
completion.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Protocol, Sequence, Tuple

from .logging import get_logger
from .severity import Severity

SEVERITY_ORDER: Sequence[Severity] = (
    Severity.FATAL,
    Severity.ERROR,
    Severity.WARNING,
    Severity.NOTICE,
)

logger = get_logger("output")


class OutputSink(Protocol):
    """Protocol consumed by rules and the orchestrator to report results."""

    def add_message(self, severity: Severity, text: str) -> None:
        """Record a finding."""

    def declare_additional_progress(self, units: int) -> None:
        """Grow the number of expected progress units."""

    def record_pass_through(self) -> None:
        """Record a check that produced no finding."""

    def debug_trace(self, text: str) -> None:
        """Emit a trace line when running in debug mode."""


@dataclass(frozen=True)
class Message:
    """A single reported finding."""

    severity: Severity
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity.value, "text": self.text}


@dataclass
class Summary:
    """Aggregate message counts by severity."""

    fatal: int = 0
    error: int = 0
    warning: int = 0
    notice: int = 0

    def increment(self, severity: Severity) -> None:
        attr = severity.value.lower()
        setattr(self, attr, getattr(self, attr) + 1)

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value.lower())

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, self.count(severity)) for severity in SEVERITY_ORDER]

    @property
    def total(self) -> int:
        return sum(self.count(severity) for severity in SEVERITY_ORDER)


@dataclass
class Progress:
    """Completion accounting: expected units versus performed units."""

    total: int = 0
    current: int = 0

    def declare(self, units: int) -> None:
        if units < 0:
            raise ValueError(f"Cannot declare a negative amount of progress: {units}")
        self.total += units

    def advance(self) -> None:
        self.current += 1

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ScanResult:
    """Bundle summary, progress and the message stream of one run."""

    debug: bool = False
    summary: Summary = field(default_factory=Summary)
    progress: Progress = field(default_factory=Progress)
    messages: List[Message] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.summary.fatal == 0 and self.summary.error == 0

    @property
    def pass_throughs(self) -> int:
        """Progress units recorded without a message."""

        return self.progress.current - len(self.messages)

    def add_message(self, severity: Severity, text: str) -> None:
        self.messages.append(Message(severity=severity, text=text))
        self.summary.increment(severity)
        self.progress.advance()
        logger.debug("%s %s", severity.value, text)

    def declare_additional_progress(self, units: int) -> None:
        self.progress.declare(units)

    def record_pass_through(self) -> None:
        self.progress.advance()

    def debug_trace(self, text: str) -> None:
        if self.debug:
            logger.debug(text)

    def messages_of(self, severity: Severity) -> List[Message]:
        return [message for message in self.messages if message.severity is severity]

    def to_dict(self) -> Dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "progress": self.progress.to_dict(),
            "messages": [message.to_dict() for message in self.messages],
            "passed": self.passed,
        }

    def exit_code(self) -> int:
        return max((message.severity.exit_priority for message in self.messages), default=0)

    def top_messages(self, limit: int = 5) -> List[Message]:
        """Return messages ordered by severity, most severe first."""

        ordered = sorted(
            enumerate(self.messages),
            key=lambda item: (-item[1].severity.rank, item[0]),
        )
        return [message for _, message in ordered[:limit]]


def format_summary_table(result: ScanResult, max_messages: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Check Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in result.summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if result.passed else "FAIL"
    lines.append(f"Status    : {status}")
    lines.append(f"Messages  : {result.summary.total}")
    lines.append(f"Progress  : {result.progress.current}/{result.progress.total}")

    messages = result.top_messages(max_messages)
    if messages:
        lines.append("")
        lines.append("Top Messages")
        lines.append("-" * 40)
        for message in messages:
            lines.append(f"[{message.severity.value}] {message.text}")
    return "\n".join(lines)
