"""Utility helpers for unit discovery and configuration files."""

from .fileio import read_yaml_file, read_text_file
from .code import iter_code_files, load_units

__all__ = [
    "read_yaml_file",
    "read_text_file",
    "iter_code_files",
    "load_units",
]
