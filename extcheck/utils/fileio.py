"""Basic file IO helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def read_json_file(path: Path) -> Any:
    """Return the parsed JSON if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def read_text_file(path: Path) -> str:
    """Return the file contents decoded as UTF-8.

    Undecodable bytes are replaced so binary files still load; a missing or
    unreadable file raises ``OSError``.
    """

    return path.read_bytes().decode("utf-8", errors="replace")
