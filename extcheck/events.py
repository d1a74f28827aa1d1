"""Extract event declarations from PHP source.

Events are declared by calling the event dispatcher with the event name as
first argument::

    $vars = array('user_id');
    extract($phpbb_dispatcher->trigger_event('acme.demo.user_loaded', compact($vars)));

The scanner below is lexical only. It understands enough PHP to skip inline
HTML, comments, strings and heredocs, so that a dispatcher call mentioned in
any of those is not reported, and it recognises the one call pattern above.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import PartialEventPolicy
from .errors import ExtractionError
from .utils import read_text_file

DISPATCH_PATTERN = re.compile(
    r"\$(?P<dispatcher>(?:this\s*->\s*)?(?:phpbb_)?dispatcher)\s*->\s*(?:trigger_event|dispatch)\s*\("
)
HEREDOC_START = re.compile(r"<<<[ \t]*(['\"]?)([A-Za-z_][A-Za-z0-9_]*)\1[ \t]*\r?\n")
INTERPOLATION = re.compile(r"(?<!\\)\$[A-Za-z_{]|(?<!\\)\{\$")


@dataclass(frozen=True)
class EventRecord:
    """One event declaration found in a source file."""

    name: str
    file: str
    declaration: str
    line: int = 0

    def matches_prefix(self, prefix: str) -> bool:
        return self.name.lower().startswith(prefix.lower())


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of scanning one file: the events found and the error, if any."""

    path: str
    events: Tuple[EventRecord, ...] = ()
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _SourceScanner:
    def __init__(self, text: str, path: str) -> None:
        self.text = text
        self.path = path
        self.pos = 0
        self.events: List[EventRecord] = []

    def scan(self) -> None:
        while self.pos < len(self.text):
            self._skip_inline_html()
            self._scan_code()

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------
    def _skip_inline_html(self) -> None:
        text = self.text
        while True:
            start = text.find("<?", self.pos)
            if start < 0:
                self.pos = len(text)
                return
            if text.startswith("<?php", start):
                self.pos = start + 5
                return
            if text.startswith("<?=", start):
                self.pos = start + 3
                return
            self.pos = start + 2

    def _scan_code(self) -> None:
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char == "?" and text.startswith("?>", self.pos):
                self.pos += 2
                return
            if char == "#" or text.startswith("//", self.pos):
                self._skip_line_comment()
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end < 0:
                    raise self._error("Unterminated comment", self.pos)
                self.pos = end + 2
            elif char in "'\"":
                _, self.pos = self._read_string(self.pos)
            elif text.startswith("<<<", self.pos):
                self._skip_heredoc()
            else:
                match = DISPATCH_PATTERN.match(text, self.pos) if char == "$" else None
                if match:
                    self._read_event(match)
                else:
                    self.pos += 1

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------
    def _skip_line_comment(self) -> None:
        end = self.text.find("\n", self.pos)
        if end < 0:
            end = len(self.text)
        close_tag = self.text.find("?>", self.pos, end)
        self.pos = close_tag if close_tag >= 0 else end

    def _read_string(self, start: int) -> Tuple[str, int]:
        """Return the raw body of the string literal at ``start`` and the offset after it."""

        text = self.text
        quote = text[start]
        index = start + 1
        while index < len(text):
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == quote:
                return text[start + 1 : index], index + 1
            index += 1
        raise self._error("Unterminated string literal", start)

    def _skip_heredoc(self) -> None:
        match = HEREDOC_START.match(self.text, self.pos)
        if match is None:
            self.pos += 3
            return
        label = re.escape(match.group(2))
        closing = re.compile(rf"^[ \t]*{label}(?![A-Za-z0-9_])", re.MULTILINE).search(self.text, match.end())
        if closing is None:
            raise self._error(f"Unterminated heredoc {match.group(2)}", self.pos)
        self.pos = closing.end()

    def _read_event(self, match: re.Match) -> None:
        # Only phpBB's own dispatcher must be called with a literal event name;
        # other dispatchers commonly take event objects or class constants.
        strict = "phpbb_" in match.group("dispatcher")
        index = match.end()
        while index < len(self.text) and self.text[index].isspace():
            index += 1
        if index >= len(self.text) or self.text[index] not in "'\"":
            self._reject("Event name must be a literal string in dispatcher call", match, strict)
            return
        quote = self.text[index]
        body, end = self._read_string(index)
        name = body.replace("\\" + quote, quote).replace("\\\\", "\\")
        if quote == '"' and INTERPOLATION.search(body):
            self._reject("Event name must not contain variables", match, strict)
        elif not name.strip():
            self._reject("Event name must not be empty", match, strict)
        else:
            self.events.append(
                EventRecord(
                    name=name,
                    file=self.path,
                    declaration=self._line_text(match.start()),
                    line=self._line_number(match.start()),
                )
            )
        self.pos = end

    def _reject(self, message: str, match: re.Match, strict: bool) -> None:
        if strict:
            raise self._error(message, match.start())
        self.pos = match.end()

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------
    def _line_number(self, offset: int) -> int:
        return self.text.count("\n", 0, offset) + 1

    def _line_text(self, offset: int) -> str:
        start = self.text.rfind("\n", 0, offset) + 1
        end = self.text.find("\n", offset)
        if end < 0:
            end = len(self.text)
        return self.text[start:end].strip()

    def _error(self, message: str, offset: int) -> ExtractionError:
        return ExtractionError(message, self.path, self._line_number(offset))


class EventExtractor:
    """Scan PHP files for event declarations.

    ``policy`` decides whether events found in a file before its scan failed
    are kept (``KEEP``) or dropped together with the rest of the file
    (``DISCARD``).
    """

    def __init__(self, policy: PartialEventPolicy = PartialEventPolicy.DISCARD) -> None:
        self.policy = policy

    def extract(self, text: str, path: str = "") -> ExtractionResult:
        scanner = _SourceScanner(text, path)
        try:
            scanner.scan()
        except ExtractionError as exc:
            kept = tuple(scanner.events) if self.policy is PartialEventPolicy.KEEP else ()
            return ExtractionResult(path=path, events=kept, error=exc)
        return ExtractionResult(path=path, events=tuple(scanner.events))

    def extract_file(self, path: Path, relative_path: str) -> ExtractionResult:
        try:
            text = read_text_file(path)
        except OSError as exc:
            error = ExtractionError(f"Unable to read file: {exc.strerror or exc}", relative_path)
            return ExtractionResult(path=relative_path, error=error)
        return self.extract(text, relative_path)

    def crawl(self, relative_paths: Iterable[str], base_dir: Path) -> List[ExtractionResult]:
        """Scan every path, relative to ``base_dir``, in the given order."""

        return [self.extract_file(base_dir / relative, relative) for relative in relative_paths]


def collect_events(results: Sequence[ExtractionResult]) -> List[EventRecord]:
    """Flatten the events of several extraction results, preserving order."""

    return [event for result in results for event in result.events]
