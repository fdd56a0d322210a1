"""Locate JavaScript files on disk and turn them into units."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator, Iterable, List

from scriptscope.unit import Unit

from .fileio import read_text_file

_LOG = logging.getLogger(__name__)

JS_EXTENSIONS = (".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx")


def iter_code_files(root_paths: Iterable[str], extensions: tuple[str, ...] = JS_EXTENSIONS) -> Generator[Path, None, None]:
    """Yield code files beneath the provided directories.

    A root that is itself a file is yielded as-is when its suffix matches.
    """

    for root in root_paths:
        root_path = Path(root)
        if root_path.is_file():
            if root_path.suffix in extensions:
                yield root_path
            continue
        for path in sorted(root_path.rglob("*")):
            if path.suffix in extensions and path.is_file():
                yield path


def load_units(root_paths: Iterable[str], extensions: tuple[str, ...] = JS_EXTENSIONS) -> List[Unit]:
    """Read every discovered file into a :class:`Unit`.

    Files that cannot be read or decoded become units without text, so they
    still appear in reports.
    """

    units: List[Unit] = []
    for path in iter_code_files(root_paths, extensions):
        try:
            units.append(Unit.from_text(str(path), read_text_file(path)))
        except (OSError, UnicodeDecodeError) as exc:
            _LOG.warning("Could not read %s: %s", path, exc)
            units.append(Unit.unavailable(str(path), str(exc), first_party=True))
    return units
