"""Checker configuration loaded from an optional YAML file."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigurationError
from .logging import get_logger
from .severity import Severity
from .utils import read_yaml_file

CONFIG_FILENAME = ".extcheck.yml"

logger = get_logger("config")


class PartialEventPolicy(str, Enum):
    """What happens to events found in a file before its scan failed."""

    DISCARD = "discard"
    KEEP = "keep"


DEFAULT_FORBIDDEN_CALLS: Dict[str, Severity] = {
    "eval": Severity.ERROR,
    "var_dump": Severity.WARNING,
    "print_r": Severity.WARNING,
    "var_export": Severity.WARNING,
    "debug_print_backtrace": Severity.WARNING,
}


@dataclass
class CheckerConfig:
    """Settings shared by the loader, the extractor and the rules."""

    manifest: str = "ext.php"
    composer_file: str = "composer.json"
    source_extension: str = ".php"
    reserved_vendor: str = "phpbb"
    reserved_core: str = "core"
    partial_events: PartialEventPolicy = PartialEventPolicy.DISCARD
    disabled_rules: Tuple[str, ...] = ()
    required_files: Tuple[str, ...] = ("composer.json", "license.txt")
    forbidden_calls: Dict[str, Severity] = field(default_factory=lambda: dict(DEFAULT_FORBIDDEN_CALLS))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CheckerConfig":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for key in ("manifest", "composer_file", "source_extension", "reserved_vendor", "reserved_core"):
            if key in data:
                values[key] = _require_string(key, data[key])
        if "partial_events" in data:
            try:
                values["partial_events"] = PartialEventPolicy(str(data["partial_events"]).lower())
            except ValueError as exc:
                raise ConfigurationError(
                    f"partial_events must be one of: {', '.join(p.value for p in PartialEventPolicy)}"
                ) from exc
        for key in ("disabled_rules", "required_files"):
            if key in data:
                values[key] = _require_string_list(key, data[key])
        if "forbidden_calls" in data:
            values["forbidden_calls"] = _parse_forbidden_calls(data["forbidden_calls"])
        return cls(**values)


def load_config(path: Optional[Path] = None, root: Optional[Path] = None) -> CheckerConfig:
    """Load the configuration from ``path`` or ``root/.extcheck.yml``.

    An explicit path must exist; the implicit file is optional.
    """

    if path is None:
        if root is None:
            return CheckerConfig()
        path = root / CONFIG_FILENAME
        if not path.exists():
            return CheckerConfig()
    elif not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        data = read_yaml_file(path)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Unable to read configuration {path}: {exc}") from exc
    if data is None:
        return CheckerConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration at {path} is not a mapping")
    logger.debug("Loaded configuration from %s", path)
    return CheckerConfig.from_mapping(data)


def _require_string(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{key} must be a non-empty string")
    return value


def _require_string_list(key: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"{key} must be a list of strings")
    return tuple(value)


def _parse_forbidden_calls(value: Any) -> Dict[str, Severity]:
    if not isinstance(value, dict):
        raise ConfigurationError("forbidden_calls must map function names to severities")
    calls: Dict[str, Severity] = {}
    for name, severity in value.items():
        try:
            calls[str(name)] = Severity.parse(severity)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown severity {severity!r} for forbidden call {name}") from exc
    return calls
