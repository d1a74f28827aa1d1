"""Rule contract shared by every rule module.

Rule modules live next to this file, are named ``check_<identifier>.py`` and
expose a ``get_rule(debug, output, basedir, namespace, config)`` factory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, FrozenSet, Protocol, Sequence, runtime_checkable

from extcheck.config import CheckerConfig
from extcheck.files import FileModel, FileType, LineContext
from extcheck.result import OutputSink


@runtime_checkable
class RuleModule(Protocol):
    """Protocol implemented by all rule modules."""

    name: str

    def wants_directory(self) -> bool:
        """Return True to receive the full path listing once."""

    def wants_file(self, file_type: FileType) -> bool:
        """Return True to receive whole files of ``file_type``."""

    def wants_line(self, file_type: FileType) -> bool:
        """Return True to receive every line of files of ``file_type``."""

    def validate_directory(self, paths: Sequence[str]) -> None:
        """Check the relative path listing of the package."""

    def validate_file(self, file: FileModel) -> None:
        """Check a single file."""

    def validate_line(self, line: LineContext) -> None:
        """Check a single line."""


@dataclass(frozen=True)
class Capabilities:
    """What a rule asked for, probed once when the rule is registered."""

    directory: bool = False
    file_types: FrozenSet[FileType] = frozenset()
    line_types: FrozenSet[FileType] = frozenset()

    @classmethod
    def probe(cls, rule: RuleModule) -> "Capabilities":
        return cls(
            directory=bool(rule.wants_directory()),
            file_types=frozenset(file_type for file_type in FileType if rule.wants_file(file_type)),
            line_types=frozenset(file_type for file_type in FileType if rule.wants_line(file_type)),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.directory or self.file_types or self.line_types)


class BaseRule:
    """Convenience base class answering the capability probes from class attributes."""

    name = "base"
    directory: bool = False
    file_types: AbstractSet[FileType] = frozenset()
    line_types: AbstractSet[FileType] = frozenset()

    def __init__(
        self,
        debug: bool,
        output: OutputSink,
        basedir: Path,
        namespace: str = "",
        config: CheckerConfig | None = None,
    ) -> None:
        self.debug = debug
        self.output = output
        self.basedir = Path(basedir)
        self.namespace = namespace
        self.config = config or CheckerConfig()

    @property
    def vendor(self) -> str:
        """The namespace as a dotted event prefix, ``acme/demo`` -> ``acme.demo``."""

        return self.namespace.replace("/", ".")

    def wants_directory(self) -> bool:
        return self.directory

    def wants_file(self, file_type: FileType) -> bool:
        return file_type in self.file_types

    def wants_line(self, file_type: FileType) -> bool:
        return file_type in self.line_types

    def validate_directory(self, paths: Sequence[str]) -> None:
        return None

    def validate_file(self, file: FileModel) -> None:
        return None

    def validate_line(self, line: LineContext) -> None:
        return None


__all__ = ["BaseRule", "Capabilities", "RuleModule"]
