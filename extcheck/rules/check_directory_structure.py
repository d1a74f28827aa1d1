"""Check that the files every extension must ship are present."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from extcheck.config import CheckerConfig
from extcheck.result import OutputSink
from extcheck.severity import Severity

from . import BaseRule, RuleModule


class DirectoryStructureRule(BaseRule):
    """Require files such as ``composer.json`` and ``license.txt`` in the base directory."""

    name = "directory_structure"
    directory = True

    def validate_directory(self, paths: Sequence[str]) -> None:
        present = {path.lower() for path in paths}
        required = self.config.required_files
        self.output.declare_additional_progress(len(required))
        for filename in required:
            if filename.lower() in present:
                self.output.record_pass_through()
            else:
                self.output.add_message(Severity.ERROR, f"Missing required file {filename} in the extension root")


def get_rule(
    debug: bool,
    output: OutputSink,
    basedir: Path,
    namespace: str = "",
    config: Optional[CheckerConfig] = None,
) -> RuleModule:
    return DirectoryStructureRule(debug, output, basedir, namespace, config)
