"""Drive the rules over a package: directory phase, then files and lines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from .config import CheckerConfig, load_config
from .discovery import RULES_PACKAGE, RegisteredRule, discover_rules
from .errors import ConfigurationError
from .files import FileModel
from .loader import FileTreeLoader, resolve_base_dir, resolve_namespace
from .logging import get_logger
from .result import ScanResult
from .severity import Severity

logger = get_logger("orchestrator")


@dataclass(frozen=True)
class RuleOutcome:
    """Result of one rule call; ``error`` is set when the rule raised."""

    rule: str
    target: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ValidationOrchestrator:
    """Run registered rules over loaded files in a fixed, deterministic order."""

    def __init__(
        self,
        rules: Sequence[RegisteredRule],
        files: Sequence[FileModel],
        listing: Sequence[str],
        output: ScanResult,
    ) -> None:
        self.rules = tuple(rules)
        self.files = tuple(files)
        self.listing = tuple(listing)
        self.output = output

    def run(self) -> ScanResult:
        if not self.rules:
            raise ConfigurationError("No rules loaded; nothing to validate")
        self.output.debug_trace("Running rules")

        # Directory rules only see the path listing, never file contents.
        for entry in self.rules:
            if entry.capabilities.directory:
                self._record(self._invoke(entry, entry.rule.validate_directory, self.listing, "directory listing"))

        for file in self.files:
            self._validate_file(file)
        return self.output

    def _validate_file(self, file: FileModel) -> None:
        line_rules: List[RegisteredRule] = []
        for entry in self.rules:
            if file.file_type in entry.capabilities.file_types:
                self._record(self._invoke(entry, entry.rule.validate_file, file, file.relative_path))
            if file.file_type in entry.capabilities.line_types:
                line_rules.append(entry)

        if not line_rules:
            return
        for line in file.iter_lines():
            for entry in line_rules:
                self._record(self._invoke(entry, entry.rule.validate_line, line, line.location))

    def _invoke(self, entry: RegisteredRule, check: Callable[[Any], None], subject: Any, target: str) -> RuleOutcome:
        try:
            check(subject)
        except Exception as exc:  # a failing rule must not stop the others
            logger.debug("Rule %s failed on %s", entry.identifier, target, exc_info=True)
            return RuleOutcome(rule=entry.identifier, target=target, error=exc)
        return RuleOutcome(rule=entry.identifier, target=target)

    def _record(self, outcome: RuleOutcome) -> None:
        if outcome.ok:
            return
        self.output.add_message(
            Severity.FATAL,
            f"Rule {outcome.rule} failed on {outcome.target}: {type(outcome.error).__name__}: {outcome.error}",
        )


def check_package(
    root: Path,
    debug: bool = False,
    namespace: Optional[str] = None,
    config: Optional[CheckerConfig] = None,
    rules_package: str = RULES_PACKAGE,
) -> ScanResult:
    """Validate the extension found below ``root`` and return the collected messages.

    Raises :class:`ConfigurationError` when the package or the rule set cannot
    be set up; every other problem is reported as a message.
    """

    root = Path(root)
    if config is None:
        config = load_config(root=root if root.is_dir() else None)
    output = ScanResult(debug=debug)

    base_dir = resolve_base_dir(root, config.manifest)
    if namespace is None:
        namespace = resolve_namespace(base_dir, config.composer_file)
    output.debug_trace(f"Base directory {base_dir}, namespace {namespace or '<none>'}")

    rules = discover_rules(rules_package).instantiate(debug, output, base_dir, namespace, config)
    if not rules:
        raise ConfigurationError("No rules loaded; nothing to validate")

    loader = FileTreeLoader(root, output, manifest=config.manifest, base_dir=base_dir)
    files, listing = loader.load()
    return ValidationOrchestrator(rules, files, listing, output).run()
