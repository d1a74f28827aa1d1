from pathlib import Path

import pytest

from extcheck.discovery import RegisteredRule
from extcheck.errors import ConfigurationError
from extcheck.files import FileModel, FileType
from extcheck.orchestrator import ValidationOrchestrator, check_package
from extcheck.result import ScanResult
from extcheck.rules import BaseRule, Capabilities
from extcheck.severity import Severity

from conftest import php_event, write_tree


class RecordingRule(BaseRule):
    directory = True
    file_types = frozenset({FileType.PHP})
    line_types = frozenset({FileType.PHP})

    def __init__(self, name, log, fail_on=None):
        super().__init__(False, ScanResult(), ".")
        self.name = name
        self.log = log
        self.fail_on = fail_on

    def validate_directory(self, paths):
        self.log.append((self.name, "directory", tuple(paths)))

    def validate_file(self, file):
        if file.relative_path == self.fail_on:
            raise RuntimeError("boom")
        self.log.append((self.name, "file", file.relative_path))

    def validate_line(self, line):
        self.log.append((self.name, "line", line.file.relative_path, line.number))


class TextOnlyRule(BaseRule):
    name = "text_only"
    file_types = frozenset({FileType.TEXT})

    def __init__(self, log):
        super().__init__(False, ScanResult(), ".")
        self.log = log

    def validate_file(self, file):
        self.log.append((self.name, "file", file.relative_path))


def register(rule):
    return RegisteredRule(identifier=rule.name, rule=rule, capabilities=Capabilities.probe(rule))


def model(relative, content):
    return FileModel.from_text(Path(relative), relative, content)


def test_empty_rule_set_is_configuration_error():
    orchestrator = ValidationOrchestrator([], [model("a.php", "<?php\n")], ["a.php"], ScanResult())

    with pytest.raises(ConfigurationError):
        orchestrator.run()


def test_phases_and_rule_order_are_deterministic():
    log = []
    files = [model("a.php", "<?php\necho 1;\n"), model("b.txt", "text\n")]
    rules = [register(RecordingRule("first", log)), register(TextOnlyRule(log)), register(RecordingRule("second", log))]

    ValidationOrchestrator(rules, files, ["a.php", "b.txt"], ScanResult()).run()

    assert log == [
        ("first", "directory", ("a.php", "b.txt")),
        ("second", "directory", ("a.php", "b.txt")),
        ("first", "file", "a.php"),
        ("second", "file", "a.php"),
        ("first", "line", "a.php", 1),
        ("second", "line", "a.php", 1),
        ("first", "line", "a.php", 2),
        ("second", "line", "a.php", 2),
        ("text_only", "file", "b.txt"),
    ]


def test_line_numbers_form_contiguous_sequence():
    log = []
    content = "\n".join(f"line {number}" for number in range(1, 8)) + "\n"

    ValidationOrchestrator([register(RecordingRule("rec", log))], [model("a.php", content)], [], ScanResult()).run()

    numbers = [entry[3] for entry in log if entry[1] == "line"]
    assert numbers == list(range(1, 8))


def test_failing_rule_does_not_stop_other_rules_or_files():
    log = []
    files = [model("a.php", "<?php\n"), model("b.php", "<?php\n")]
    rules = [register(RecordingRule("flaky", log, fail_on="a.php")), register(RecordingRule("steady", log))]
    result = ScanResult()

    ValidationOrchestrator(rules, files, ["a.php", "b.php"], result).run()

    file_calls = [(entry[0], entry[2]) for entry in log if entry[1] == "file"]
    assert file_calls == [("steady", "a.php"), ("flaky", "b.php"), ("steady", "b.php")]
    # The failing rule still gets its line checks for the same file.
    assert ("flaky", "line", "a.php", 1) in log
    fatal = result.messages_of(Severity.FATAL)
    assert len(fatal) == 1
    assert "flaky" in fatal[0].text and "a.php" in fatal[0].text and "boom" in fatal[0].text


def test_check_package_reports_findings(extension):
    root = extension(
        {
            "event/listener.php": php_event("phpbb.bad", "acme.demo.good"),
            "controller/main.php": "<?php\nvar_dump($user);\n",
            "includes/legacy.php": "echo 'no open tag';\n?>\n",
        }
    )

    result = check_package(root)

    texts = [message.text for message in result.messages]
    assert len(result.messages_of(Severity.ERROR)) == 2
    assert any("phpbb.bad" in text for text in texts)
    assert any("includes/legacy.php should start with <?php" in text for text in texts)
    assert any("var_dump() is not allowed in controller/main.php:2" in text for text in texts)
    assert len(result.messages_of(Severity.NOTICE)) == 1
    assert result.exit_code() == 2
    assert not result.passed


def test_check_package_clean_extension_passes(extension):
    root = extension({"event/listener.php": php_event("acme.demo.user_loaded")})

    result = check_package(root)

    assert result.messages == []
    assert result.passed
    assert result.progress.current == result.progress.total


def test_check_package_without_manifest_aborts(tmp_path):
    write_tree(tmp_path, {"composer.json": "{}"})

    with pytest.raises(ConfigurationError):
        check_package(tmp_path)


def test_check_package_with_empty_rule_set_aborts(extension, tmp_path, monkeypatch):
    root = extension()
    write_tree(tmp_path / "modules", {"no_rules_here/__init__.py": ""})
    monkeypatch.syspath_prepend(str(tmp_path / "modules"))

    with pytest.raises(ConfigurationError, match="No rules"):
        check_package(root, rules_package="no_rules_here")


def test_namespace_override(extension):
    root = extension({"event/listener.php": php_event("other.vendor.created")})

    result = check_package(root, namespace="other/vendor")

    assert result.messages == []


def test_events_above_base_dir_are_checked(extension, tmp_path):
    root = extension({"listener.php": php_event("acme.demo.inside")})
    write_tree(tmp_path, {"listener.php": php_event("phpbb.outside")})

    result = check_package(root)

    errors = result.messages_of(Severity.ERROR)
    assert len(errors) == 1
    assert "phpbb.outside" in errors[0].text
    assert "../../listener.php" in errors[0].text
