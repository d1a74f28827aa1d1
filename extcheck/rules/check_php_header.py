"""Check the opening and closing tags of PHP files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from extcheck.config import CheckerConfig
from extcheck.files import FileModel, FileType
from extcheck.result import OutputSink
from extcheck.severity import Severity

from . import BaseRule, RuleModule


class PhpHeaderRule(BaseRule):
    """PHP files must open with ``<?php`` and should omit the closing ``?>``."""

    name = "php_header"
    file_types = frozenset({FileType.PHP})

    def validate_file(self, file: FileModel) -> None:
        self.output.declare_additional_progress(2)
        first = next((line for line in file.lines if line.strip()), "")
        if first.lstrip().startswith("<?php"):
            self.output.record_pass_through()
        else:
            self.output.add_message(Severity.ERROR, f"{file.relative_path} should start with <?php")

        if file.content.rstrip().endswith("?>"):
            self.output.add_message(
                Severity.NOTICE,
                f"{file.relative_path} ends with a closing ?> tag which should be omitted",
            )
        else:
            self.output.record_pass_through()


def get_rule(
    debug: bool,
    output: OutputSink,
    basedir: Path,
    namespace: str = "",
    config: Optional[CheckerConfig] = None,
) -> RuleModule:
    return PhpHeaderRule(debug, output, basedir, namespace, config)
