"""Analyzed units: one piece of JavaScript plus pass-through metadata."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

SOURCE_MAP_PATTERN = re.compile(r"//[@#]\s*sourceMappingURL=")


@dataclass(frozen=True)
class Unit:
    """A script to scan.

    ``source_text`` is ``None`` when the content could not be obtained; such
    units are listed in reports but never scanned.
    """

    unit_id: str
    source_text: Optional[str]
    size: int = 0
    first_party: bool = False
    has_source_map: bool = False
    fetch_error: Optional[str] = None

    @classmethod
    def from_text(cls, unit_id: str, source_text: str, first_party: bool = True) -> "Unit":
        return cls(
            unit_id=unit_id,
            source_text=source_text,
            size=len(source_text.encode("utf-8")),
            first_party=first_party,
            has_source_map=bool(SOURCE_MAP_PATTERN.search(source_text)),
        )

    @classmethod
    def unavailable(cls, unit_id: str, error: str, first_party: bool = False) -> "Unit":
        return cls(unit_id=unit_id, source_text=None, first_party=first_party, fetch_error=error)

    @property
    def scannable(self) -> bool:
        return self.source_text is not None
