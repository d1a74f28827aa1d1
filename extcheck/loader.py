"""Locate the package base directory and load its files into memory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ConfigurationError, ScanError
from .files import FileModel
from .logging import get_logger
from .result import OutputSink
from .severity import Severity
from .utils import iter_package_files, read_json_file, read_text_file

DEFAULT_MANIFEST = "ext.php"
DEFAULT_COMPOSER_FILE = "composer.json"

logger = get_logger("loader")


def resolve_base_dir(root: Path, manifest: str = DEFAULT_MANIFEST) -> Path:
    """Return the directory holding the single manifest marker under ``root``."""

    if not root.is_dir():
        raise ConfigurationError(f"Package directory does not exist: {root}")
    matches = [path for path in iter_package_files(root, manifest) if path.name == manifest]
    if not matches:
        raise ConfigurationError(f"Can't find required {manifest} in {root}")
    if len(matches) > 1:
        found = ", ".join(path.relative_to(root).as_posix() for path in matches)
        raise ConfigurationError(f"Found more than one {manifest} in {root}: {found}")
    return matches[0].parent


def resolve_namespace(base_dir: Path, composer_file: str = DEFAULT_COMPOSER_FILE) -> str:
    """Return the ``vendor/name`` declared in the package's composer file.

    A missing or unusable composer file yields an empty namespace.
    """

    path = base_dir / composer_file
    try:
        data = read_json_file(path)
    except (OSError, ValueError) as exc:
        logger.warning("Unable to read %s: %s", path, exc)
        return ""
    if data is None:
        logger.warning("No %s found in %s; event names cannot be matched to a namespace", composer_file, base_dir)
        return ""
    name = data.get("name") if isinstance(data, dict) else None
    if not isinstance(name, str):
        logger.warning("%s does not declare a package name", path)
        return ""
    return name.strip()


class FileTreeLoader:
    """Walk a package tree once and build the file models and path listing."""

    def __init__(
        self,
        root: Path,
        output: OutputSink,
        manifest: str = DEFAULT_MANIFEST,
        base_dir: Optional[Path] = None,
    ) -> None:
        self.root = Path(root)
        self.output = output
        self.manifest = manifest
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        if self._base_dir is None:
            self._base_dir = resolve_base_dir(self.root, self.manifest)
        return self._base_dir

    def relative_path(self, path: Path) -> str:
        """Return ``path`` relative to the base directory in POSIX form.

        Files above the base directory get ``../`` components, so every entry
        resolves back to its file through ``base_dir / entry``.
        """

        return Path(os.path.relpath(path, self.base_dir)).as_posix()

    def load(self) -> Tuple[Tuple[FileModel, ...], Tuple[str, ...]]:
        """Return the ordered file models and the matching relative path listing."""

        base_dir = self.base_dir
        self.output.debug_trace(f"Loading files below {self.root} (base directory {base_dir})")
        files: List[FileModel] = []
        listing: List[str] = []
        for path in iter_package_files(self.root):
            relative = self.relative_path(path)
            try:
                model = self._load_file(path, relative)
            except ScanError as exc:
                self.output.add_message(
                    Severity.NOTICE,
                    f"Found a file that doesn't seem to be readable or doesn't exist: {exc}",
                )
                continue
            files.append(model)
            listing.append(relative)
        self.output.debug_trace(f"Loaded {len(files)} files")
        return tuple(files), tuple(listing)

    def _load_file(self, path: Path, relative: str) -> FileModel:
        try:
            content = read_text_file(path)
        except OSError as exc:
            raise ScanError(relative, exc.strerror or str(exc)) from exc
        return FileModel.from_text(path=path, relative_path=relative, content=content)
