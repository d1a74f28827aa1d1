"""Utility helpers for the checker."""

from .fileio import read_json_file, read_text_file, read_yaml_file
from .code import iter_package_files, VCS_DIRECTORIES

__all__ = [
    "read_json_file",
    "read_text_file",
    "read_yaml_file",
    "iter_package_files",
    "VCS_DIRECTORIES",
]
