"""In-memory models of the files of a scanned package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Tuple


class FileType(str, Enum):
    """File classification derived from the file extension."""

    PHP = "php"
    HTML = "html"
    JS = "js"
    CSS = "css"
    JSON = "json"
    YAML = "yaml"
    XML = "xml"
    TEXT = "text"
    MARKDOWN = "markdown"
    IMAGE = "image"
    OTHER = "other"

    @classmethod
    def from_path(cls, path: str | Path) -> "FileType":
        suffix = Path(path).suffix.lower()
        return _SUFFIXES.get(suffix, cls.OTHER)


_SUFFIXES = {
    ".php": FileType.PHP,
    ".html": FileType.HTML,
    ".htm": FileType.HTML,
    ".js": FileType.JS,
    ".css": FileType.CSS,
    ".json": FileType.JSON,
    ".yml": FileType.YAML,
    ".yaml": FileType.YAML,
    ".xml": FileType.XML,
    ".txt": FileType.TEXT,
    ".md": FileType.MARKDOWN,
    ".png": FileType.IMAGE,
    ".gif": FileType.IMAGE,
    ".jpg": FileType.IMAGE,
    ".jpeg": FileType.IMAGE,
    ".svg": FileType.IMAGE,
}


@dataclass(frozen=True)
class FileModel:
    """One file under the package base directory."""

    path: Path
    relative_path: str
    file_type: FileType
    content: str
    lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, path: Path, relative_path: str, content: str) -> "FileModel":
        return cls(
            path=path,
            relative_path=relative_path,
            file_type=FileType.from_path(path),
            content=content,
            lines=tuple(content.splitlines()),
        )

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def iter_lines(self) -> Iterator["LineContext"]:
        """Yield a context per line, numbered from 1 without gaps."""

        for number, text in enumerate(self.lines, start=1):
            yield LineContext(file=self, number=number, text=text)


@dataclass(frozen=True)
class LineContext:
    """A single line of a file during line-level validation.

    ``file`` is a borrowed reference into the orchestrator's file list.
    """

    file: FileModel
    number: int
    text: str

    @property
    def location(self) -> str:
        return f"{self.file.relative_path}:{self.number}"
