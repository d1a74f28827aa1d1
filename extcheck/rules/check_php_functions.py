"""Flag debugging and unsafe function calls in PHP code."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from extcheck.config import CheckerConfig
from extcheck.files import FileType, LineContext
from extcheck.result import OutputSink

from . import BaseRule, RuleModule

COMMENT_PREFIXES = ("//", "#", "*", "/*")


class PhpFunctionsRule(BaseRule):
    """Report calls to the configured forbidden functions, line by line."""

    name = "php_functions"
    line_types = frozenset({FileType.PHP})

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        # PHP function names are case-insensitive.
        self._severities = {name.lower(): severity for name, severity in self.config.forbidden_calls.items()}
        calls = sorted(self._severities, key=len, reverse=True)
        self._pattern = None
        if calls:
            alternatives = "|".join(re.escape(call) for call in calls)
            self._pattern = re.compile(rf"(?<![\w$>:])({alternatives})\s*\(", re.IGNORECASE)

    def validate_line(self, line: LineContext) -> None:
        if self._pattern is None or line.text.lstrip().startswith(COMMENT_PREFIXES):
            return
        for match in self._pattern.finditer(line.text):
            call = match.group(1).lower()
            self.output.declare_additional_progress(1)
            self.output.add_message(self._severities[call], f"Usage of {call}() is not allowed in {line.location}")


def get_rule(
    debug: bool,
    output: OutputSink,
    basedir: Path,
    namespace: str = "",
    config: Optional[CheckerConfig] = None,
) -> RuleModule:
    return PhpFunctionsRule(debug, output, basedir, namespace, config)
